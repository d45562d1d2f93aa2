from collections.abc import Sequence
from math import prod

from ..config import get_policy
from ..diagnostics import (
    AmbiguousShapeError,
    ErrorCode,
    InvalidArgumentError,
    SizeMismatchError,
)
from ..tensor_types import Shape


def infer_size(
    shape: Sequence[int], numel: int, *, legacy_empty_shapes: bool | None = None
) -> Shape:
    """Resolve one optional `-1` entry of `shape` against `numel`.

    Raises when more than one `-1` is present, when an entry is below `-1`, or
    when the explicit entries cannot produce `numel` elements. With
    `legacy_empty_shapes` (default: the active policy), a zero-element result
    collapses to `(0,)`.
    """
    if legacy_empty_shapes is None:
        legacy_empty_shapes = get_policy().legacy_empty_shapes
    resolved = list(shape)
    known_numel = 1
    infer_dim: int | None = None
    for dim, size in enumerate(shape):
        if size == -1:
            if infer_dim is not None:
                raise AmbiguousShapeError(
                    code=ErrorCode.AMBIGUOUS_SHAPE,
                    message=(
                        "ambiguous shape: only one dimension can be inferred, "
                        f"got shape {tuple(shape)}"
                    ),
                    help="use -1 for at most one dimension",
                    related=("shape inference",),
                    data={"operation": "reshape", "dim": dim},
                )
            infer_dim = dim
        elif size >= 0:
            known_numel *= size
        else:
            raise InvalidArgumentError(
                code=ErrorCode.INVALID_ARGUMENT,
                message=f"invalid argument: invalid shape dimension {size}",
                help="shape entries must be non-negative or -1",
                related=("shape inference",),
                data={"operation": "reshape", "dim": dim, "size": size},
            )

    fits_exactly = numel == known_numel
    fits_with_inferred = (
        infer_dim is not None and known_numel > 0 and numel % known_numel == 0
    )
    if not (fits_exactly or fits_with_inferred):
        raise SizeMismatchError(
            code=ErrorCode.NUMEL_MISMATCH,
            message=(
                f"numel mismatch: shape '{list(shape)}' is invalid for input "
                f"of size {numel}"
            ),
            help="keep the product of the shape equal to the number of elements",
            related=("shape inference",),
            data={"operation": "reshape", "numel": numel},
        )

    if infer_dim is not None:
        # A wildcard next to a zero-size dim could take any value.
        if known_numel == 0:
            raise SizeMismatchError(
                code=ErrorCode.NUMEL_MISMATCH,
                message=(
                    "numel mismatch: cannot reshape tensor of 0 elements into "
                    f"shape {list(shape)} because the unspecified dimension "
                    "size -1 can be any value"
                ),
                help="spell out every dimension when reshaping zero-element tensors",
                related=("shape inference",),
                data={"operation": "reshape", "numel": numel},
            )
        resolved[infer_dim] = numel // known_numel

    if legacy_empty_shapes and numel == 0:
        return (0,)
    return tuple(resolved)


def compute_stride(
    old_sizes: Sequence[int],
    old_strides: Sequence[int],
    new_sizes: Sequence[int],
) -> Shape | None:
    """Return strides viewing `old` memory as `new_sizes`, or None.

    The old layout is walked from the innermost dim outwards in chunks of
    dims that are contiguous with respect to each other; each chunk must be
    covered exactly by a run of new dims. Size-1 dims never break a chunk.
    """
    if not old_sizes:
        return (1,) * len(new_sizes)

    numel = prod(old_sizes, start=1)
    if numel == 0 and tuple(old_sizes) == tuple(new_sizes):
        return tuple(old_strides)

    new_strides = [0] * len(new_sizes)
    if numel == 0:
        for view_d in range(len(new_sizes) - 1, -1, -1):
            if view_d == len(new_sizes) - 1:
                new_strides[view_d] = 1
            else:
                new_strides[view_d] = (
                    max(new_sizes[view_d + 1], 1) * new_strides[view_d + 1]
                )
        return tuple(new_strides)

    view_d = len(new_sizes) - 1
    chunk_base_stride = old_strides[-1]
    tensor_numel = 1
    view_numel = 1
    for tensor_d in range(len(old_sizes) - 1, -1, -1):
        tensor_numel *= old_sizes[tensor_d]
        chunk_ends = tensor_d == 0 or (
            old_sizes[tensor_d - 1] != 1
            and old_strides[tensor_d - 1] != tensor_numel * chunk_base_stride
        )
        if not chunk_ends:
            continue
        while view_d >= 0 and (view_numel < tensor_numel or new_sizes[view_d] == 1):
            new_strides[view_d] = view_numel * chunk_base_stride
            view_numel *= new_sizes[view_d]
            view_d -= 1
        if view_numel != tensor_numel:
            return None
        if tensor_d > 0:
            chunk_base_stride = old_strides[tensor_d - 1]
            tensor_numel = 1
            view_numel = 1

    if view_d != -1:
        return None
    return tuple(new_strides)


__all__ = ["compute_stride", "infer_size"]
