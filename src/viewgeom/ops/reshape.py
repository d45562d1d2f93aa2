"""Reshape resolution: stride-preserving view when possible, copy otherwise."""

import logging
from collections.abc import Sequence
from math import prod

from ..config import get_policy
from ..diagnostics import ErrorCode, InvalidArgumentError, NotAViewError
from ..geometry import compute_stride, contiguous_strides, infer_size, wrap_dim
from ..tensor import Tensor
from ..tensor_types import Geometry, Shape, TensorHandle, ViewMeta
from .checks import require_strided
from .materialize import clone
from .views import view_from_geometry

logger = logging.getLogger(__name__)


def _unsafe_view(tensor: Tensor, sizes: Shape) -> Tensor:
    """View a freshly copied temporary without marking the result as a view."""
    return Tensor(
        tensor.storage,
        sizes,
        contiguous_strides(sizes),
        tensor.storage_offset,
        view_meta=ViewMeta(op="reshape_copy"),
    )


def reshape(tensor: TensorHandle, shape: Sequence[int]) -> Tensor:
    """Return `tensor` with `shape`, aliasing storage whenever strides allow.

    One entry of `shape` may be `-1` and is inferred from the element count.
    When no stride layout exists the data is copied into new contiguous
    storage, and the result is not reported as a view.
    """
    require_strided(tensor, operation="reshape")
    policy = get_policy()
    sizes = infer_size(
        tuple(shape), tensor.numel(), legacy_empty_shapes=policy.legacy_empty_shapes
    )
    strides = compute_stride(tensor.sizes, tensor.strides, sizes)
    if strides is not None:
        return view_from_geometry(
            tensor, Geometry(sizes, strides, tensor.storage_offset), op="reshape"
        )

    if not policy.copy_fallback:
        raise NotAViewError(
            code=ErrorCode.NOT_A_VIEW,
            message=(
                "not a view: reshape mapping is not representable without "
                "copying and copy_fallback is disabled"
            ),
            help="enable copy_fallback or make the input contiguous first",
            related=("reshape stride inference",),
            data={"operation": "reshape"},
        )
    logger.debug(
        "reshape %s -> %s needs a copy (strides %s)",
        tensor.sizes,
        sizes,
        tensor.strides,
    )
    return _unsafe_view(clone(tensor), sizes)


def reshape_as(tensor: Tensor, other: TensorHandle) -> Tensor:
    return reshape(tensor, other.sizes)


def flatten(tensor: Tensor, start_dim: int = 0, end_dim: int = -1) -> Tensor:
    """Merge dims `start_dim..end_dim` (inclusive) into one."""
    require_strided(tensor, operation="flatten")
    rank = tensor.dim()
    if rank == 0:
        wrap_dim(start_dim, rank, operation="flatten", scalar_ok=True)
        wrap_dim(end_dim, rank, operation="flatten", scalar_ok=True)
        return tensor
    start_dim = wrap_dim(start_dim, rank, operation="flatten")
    end_dim = wrap_dim(end_dim, rank, operation="flatten")
    if start_dim > end_dim:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=(
                "invalid argument: flatten() has invalid args: start_dim cannot "
                "come after end_dim"
            ),
            help="pass start_dim <= end_dim",
            related=("flatten contract",),
            data={"operation": "flatten", "start_dim": start_dim, "end_dim": end_dim},
        )
    if start_dim == end_dim:
        return tensor

    # Product of the merged range only: a -1 here could absorb any value
    # when another dim is zero.
    merged = prod(tensor.sizes[start_dim : end_dim + 1], start=1)
    shape = tensor.sizes[:start_dim] + (merged,) + tensor.sizes[end_dim + 1 :]
    return reshape(tensor, shape)


__all__ = ["flatten", "reshape", "reshape_as"]
