"""View Constructor and the single-step view operations built on it.

Every zero-copy operation in the package ends in `view_from_geometry` (new
handle) or `Tensor.set_geometry_` (in-place variants). Geometry is always
computed, and therefore validated, before a handle is created or mutated.
"""

from collections.abc import Sequence

from ..config import get_policy
from ..diagnostics import ErrorCode, NotAViewError
from ..geometry import (
    compute_stride,
    diagonal_geometry,
    expand_geometry,
    infer_size,
    squeeze_dim_geometry,
    squeeze_geometry,
    unfold_geometry,
    unsqueeze_geometry,
    wrap_dim,
)
from ..tensor import Tensor, validate_geometry
from ..tensor_types import Geometry, TensorHandle, ViewMeta
from .checks import require_strided


def view_from_geometry(
    tensor: Tensor,
    geometry: Geometry,
    /,
    *,
    op: str,
    implicit: bool = False,
) -> Tensor:
    """Build a new handle sharing `tensor`'s storage with `geometry`."""
    base = tensor if tensor.base is None else tensor.base
    return Tensor(
        tensor.storage,
        geometry.sizes,
        geometry.strides,
        geometry.storage_offset,
        base=base,
        view_meta=ViewMeta(op=op, implicit=implicit),
    )


def as_strided(
    tensor: Tensor,
    sizes: Sequence[int],
    strides: Sequence[int],
    storage_offset: int | None = None,
) -> Tensor:
    """Return a view of `tensor`'s storage with exactly the given geometry."""
    require_strided(tensor, operation="as_strided")
    geometry = Geometry(
        tuple(sizes),
        tuple(strides),
        tensor.storage_offset if storage_offset is None else storage_offset,
    )
    validate_geometry(
        geometry.sizes,
        geometry.strides,
        geometry.storage_offset,
        operation="as_strided",
        storage_size=len(tensor.storage),
    )
    return view_from_geometry(tensor, geometry, op="as_strided")


def as_strided_(
    tensor: Tensor,
    sizes: Sequence[int],
    strides: Sequence[int],
    storage_offset: int | None = None,
) -> Tensor:
    """Replace `tensor`'s geometry in place and return it."""
    require_strided(tensor, operation="as_strided_")
    geometry = Geometry(
        tuple(sizes),
        tuple(strides),
        tensor.storage_offset if storage_offset is None else storage_offset,
    )
    return tensor.set_geometry_(geometry)


def view(tensor: Tensor, shape: Sequence[int]) -> Tensor:
    """Reinterpret `tensor` as `shape` without copying, or fail."""
    require_strided(tensor, operation="view")
    sizes = infer_size(
        shape,
        tensor.numel(),
        legacy_empty_shapes=get_policy().legacy_empty_shapes,
    )
    strides = compute_stride(tensor.sizes, tensor.strides, sizes)
    if strides is None:
        raise NotAViewError(
            code=ErrorCode.NOT_A_VIEW,
            message=(
                "not a view: view size is not compatible with input tensor's "
                "size and stride (at least one dimension spans across two "
                "contiguous subspaces)"
            ),
            help="use reshape to allow a copy when no stride layout exists",
            related=("view stride inference",),
            data={"operation": "view"},
        )
    return view_from_geometry(
        tensor, Geometry(sizes, strides, tensor.storage_offset), op="view"
    )


def view_as(tensor: Tensor, other: TensorHandle) -> Tensor:
    return view(tensor, other.sizes)


def numel(tensor: TensorHandle) -> int:
    return tensor.numel()


def _squeeze_target(tensor: Tensor, dim: int | None, *, operation: str) -> Geometry:
    if dim is None:
        return squeeze_geometry(tensor.geometry)
    wrapped = wrap_dim(dim, tensor.dim(), operation=operation, scalar_ok=True)
    return squeeze_dim_geometry(tensor.geometry, wrapped)


def squeeze(tensor: Tensor, dim: int | None = None) -> Tensor:
    """Drop size-1 axes (all of them, or only `dim`)."""
    require_strided(tensor, operation="squeeze")
    geometry = _squeeze_target(tensor, dim, operation="squeeze")
    return view_from_geometry(tensor, geometry, op="squeeze")


def squeeze_(tensor: Tensor, dim: int | None = None) -> Tensor:
    require_strided(tensor, operation="squeeze_")
    geometry = _squeeze_target(tensor, dim, operation="squeeze_")
    return tensor.set_geometry_(geometry)


def _unsqueeze_target(tensor: Tensor, dim: int, *, operation: str) -> Geometry:
    wrapped = wrap_dim(dim, tensor.dim() + 1, operation=operation)
    return unsqueeze_geometry(
        tensor.geometry,
        wrapped,
        legacy_empty_shapes=get_policy().legacy_empty_shapes,
    )


def unsqueeze(tensor: Tensor, dim: int) -> Tensor:
    """Insert a size-1 axis at `dim` (valid range is `[-rank-1, rank]`)."""
    require_strided(tensor, operation="unsqueeze")
    geometry = _unsqueeze_target(tensor, dim, operation="unsqueeze")
    return view_from_geometry(tensor, geometry, op="unsqueeze")


def unsqueeze_(tensor: Tensor, dim: int) -> Tensor:
    require_strided(tensor, operation="unsqueeze_")
    geometry = _unsqueeze_target(tensor, dim, operation="unsqueeze_")
    return tensor.set_geometry_(geometry)


def expand(tensor: Tensor, sizes: Sequence[int], *, implicit: bool = False) -> Tensor:
    """Broadcast `tensor` to `sizes` with zero strides on expanded axes.

    `implicit` marks expands inserted by broadcasting rather than requested
    by a caller; tracing collaborators may drop implicit expands.
    """
    require_strided(tensor, operation="expand")
    geometry = expand_geometry(tensor.geometry, tuple(sizes))
    return view_from_geometry(tensor, geometry, op="expand", implicit=implicit)


def expand_as(tensor: Tensor, other: TensorHandle) -> Tensor:
    return expand(tensor, other.sizes)


def diagonal(tensor: Tensor, offset: int = 0, dim1: int = 0, dim2: int = 1) -> Tensor:
    """Return the diagonal of `dim1`/`dim2` as a trailing axis."""
    require_strided(tensor, operation="diagonal")
    rank = tensor.dim()
    geometry = diagonal_geometry(
        tensor.geometry,
        offset,
        wrap_dim(dim1, rank, operation="diagonal"),
        wrap_dim(dim2, rank, operation="diagonal"),
        legacy_empty_shapes=get_policy().legacy_empty_shapes,
    )
    return view_from_geometry(tensor, geometry, op="diagonal")


def unfold(tensor: Tensor, dim: int, size: int, step: int) -> Tensor:
    """Return all `size`-long windows along `dim`, `step` apart."""
    require_strided(tensor, operation="unfold")
    wrapped = wrap_dim(dim, tensor.dim(), operation="unfold", scalar_ok=True)
    geometry = unfold_geometry(tensor.geometry, wrapped, size, step)
    return view_from_geometry(tensor, geometry, op="unfold")


__all__ = [
    "as_strided",
    "as_strided_",
    "diagonal",
    "expand",
    "expand_as",
    "numel",
    "squeeze",
    "squeeze_",
    "unfold",
    "unsqueeze",
    "unsqueeze_",
    "view",
    "view_as",
    "view_from_geometry",
]
