"""Sub-region operations expressed as views: narrow, select, slice, split."""

import sys
from collections.abc import Sequence

from ..config import get_policy
from ..diagnostics import (
    DimensionOutOfRangeError,
    ErrorCode,
    InvalidArgumentError,
    SizeMismatchError,
)
from ..geometry import select_geometry, slice_geometry, wrap_dim
from ..storage import Storage
from ..tensor import Tensor
from .checks import require_nonscalar, require_strided
from .views import view_from_geometry


def narrow(tensor: Tensor, dim: int, start: int, length: int) -> Tensor:
    """Return `length` elements of `dim` beginning at `start`."""
    require_strided(tensor, operation="narrow")
    require_nonscalar(tensor, operation="narrow")
    dim = wrap_dim(dim, tensor.dim(), operation="narrow")
    cur_size = tensor.sizes[dim]
    if start < 0:
        raise DimensionOutOfRangeError(
            code=ErrorCode.INDEX_OUT_OF_RANGE,
            message=f"index out of range: narrow() start {start} out of range",
            help="narrow start must be non-negative",
            related=("narrow contract",),
            data={"operation": "narrow", "dim": dim, "start": start},
        )
    zero_length_forbidden = (
        get_policy().legacy_empty_shapes and length == 0 and cur_size != 0
    )
    if length < 0 or zero_length_forbidden:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"invalid argument: narrow() length must be positive, got {length}",
            help="zero lengths are only accepted on zero-size dimensions",
            related=("narrow contract", "legacy empty shapes"),
            data={"operation": "narrow", "dim": dim, "length": length},
        )
    if start > cur_size - length:
        raise DimensionOutOfRangeError(
            code=ErrorCode.INDEX_OUT_OF_RANGE,
            message=(
                f"index out of range: start ({start}) + length ({length}) "
                f"exceeds dimension size ({cur_size})"
            ),
            help="keep start + length within the dimension size",
            related=("narrow contract",),
            data={
                "operation": "narrow",
                "dim": dim,
                "start": start,
                "length": length,
                "size": cur_size,
            },
        )
    return slice(tensor, dim, start, start + length, 1)


def select(tensor: Tensor, dim: int, index: int) -> Tensor:
    """Fix `dim` at `index` and drop it."""
    require_strided(tensor, operation="select")
    require_nonscalar(tensor, operation="select")
    dim = wrap_dim(dim, tensor.dim(), operation="select")
    geometry = select_geometry(tensor.geometry, dim, index)
    return view_from_geometry(tensor, geometry, op="select")


def slice(
    tensor: Tensor,
    dim: int = 0,
    start: int = 0,
    end: int = sys.maxsize,
    step: int = 1,
) -> Tensor:
    """Return the `start:end:step` window of `dim` as a view.

    Under legacy empty shapes a zero-length result is a fresh `(0,)` tensor
    rather than a view.
    """
    require_strided(tensor, operation="slice")
    require_nonscalar(tensor, operation="slice")
    dim = wrap_dim(dim, tensor.dim(), operation="slice")
    geometry = slice_geometry(tensor.geometry, dim, start, end, step)
    if geometry.sizes[dim] == 0 and get_policy().legacy_empty_shapes:
        return Tensor(Storage.allocate(0, tensor.dtype), (0,))
    return view_from_geometry(tensor, geometry, op="slice")


def split(tensor: Tensor, split_size: int, dim: int = 0) -> list[Tensor]:
    """Split `dim` into chunks of `split_size`; the last chunk may be smaller."""
    require_strided(tensor, operation="split")
    require_nonscalar(tensor, operation="split")
    if split_size < 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=(
                "invalid argument: split expects split_size be non-negative, "
                f"but got split_size={split_size}"
            ),
            help="pass a non-negative split size",
            related=("split contract",),
            data={"operation": "split", "split_size": split_size},
        )
    dim = wrap_dim(dim, tensor.dim(), operation="split")
    dim_size = tensor.sizes[dim]
    if split_size == 0 and dim_size != 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=(
                "invalid argument: split_size can only be 0 if dimension size "
                f"is 0, but got dimension size of {dim_size}"
            ),
            help="pass a positive split size for non-empty dimensions",
            related=("split contract",),
            data={"operation": "split", "split_size": split_size, "size": dim_size},
        )

    # A split size larger than the dim still yields one chunk.
    num_splits = 1
    if split_size != 0:
        num_splits = max((dim_size + split_size - 1) // split_size, 1)
    last_split_size = split_size - (split_size * num_splits - dim_size)

    chunks: list[Tensor] = []
    for index in range(num_splits):
        length = split_size if index < num_splits - 1 else last_split_size
        chunks.append(narrow(tensor, dim, index * split_size, length))
    return chunks


def split_with_sizes(
    tensor: Tensor, split_sizes: Sequence[int], dim: int = 0
) -> list[Tensor]:
    """Split `dim` into consecutive chunks of the given lengths."""
    require_strided(tensor, operation="split_with_sizes")
    require_nonscalar(tensor, operation="split_with_sizes")
    dim = wrap_dim(dim, tensor.dim(), operation="split_with_sizes")
    dim_size = tensor.sizes[dim]
    sizes = tuple(split_sizes)
    if any(length < 0 for length in sizes):
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=(
                "invalid argument: split_with_sizes expects split_sizes have "
                f"only non-negative entries, but got split_sizes={list(sizes)}"
            ),
            help="pass non-negative chunk lengths",
            related=("split_with_sizes contract",),
            data={"operation": "split_with_sizes", "dim": dim},
        )
    if sum(sizes) != dim_size:
        raise SizeMismatchError(
            code=ErrorCode.SIZE_MISMATCH,
            message=(
                "size mismatch: split_with_sizes expects split_sizes to sum "
                f"exactly to {dim_size} (input tensor's size at dimension {dim}), "
                f"but got split_sizes={list(sizes)}"
            ),
            help="make the chunk lengths add up to the dimension size",
            related=("split_with_sizes contract",),
            data={"operation": "split_with_sizes", "dim": dim, "size": dim_size},
        )

    chunks: list[Tensor] = []
    start = 0
    for length in sizes:
        chunks.append(narrow(tensor, dim, start, length))
        start += length
    return chunks


def chunk(tensor: Tensor, chunks: int, dim: int = 0) -> list[Tensor]:
    """Split `dim` into `chunks` nearly equal pieces."""
    require_strided(tensor, operation="chunk")
    require_nonscalar(tensor, operation="chunk")
    if chunks <= 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=(
                "invalid argument: chunk expects `chunks` to be greater than 0, "
                f"got: {chunks}"
            ),
            help="pass a positive number of chunks",
            related=("chunk contract",),
            data={"operation": "chunk", "chunks": chunks},
        )
    dim = wrap_dim(dim, tensor.dim(), operation="chunk")
    dim_size = tensor.sizes[dim]
    split_size = (dim_size + chunks - 1) // chunks

    # split() would collapse any number of empty chunks into one.
    if split_size == 0 and dim_size == 0:
        split_sizes = [split_size] * chunks
        split_sizes[-1] = split_size - (split_size * chunks - dim_size)
        return split_with_sizes(tensor, split_sizes, dim)
    return split(tensor, split_size, dim)


def unbind(tensor: Tensor, dim: int = 0) -> list[Tensor]:
    """Return every slice along `dim` with that dim removed."""
    require_strided(tensor, operation="unbind")
    require_nonscalar(tensor, operation="unbind")
    dim = wrap_dim(dim, tensor.dim(), operation="unbind")
    return [select(tensor, dim, index) for index in range(tensor.sizes[dim])]


__all__ = [
    "chunk",
    "narrow",
    "select",
    "slice",
    "split",
    "split_with_sizes",
    "unbind",
]
