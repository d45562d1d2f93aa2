from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..diagnostics import DimensionOutOfRangeError, ErrorCode

if TYPE_CHECKING:
    from ..tensor import Tensor


def wrap_dim(
    dim: int,
    rank: int,
    *,
    operation: str = "wrap_dim",
    scalar_ok: bool = False,
) -> int:
    """Resolve one possibly-negative dimension index against `rank`.

    With `scalar_ok`, a rank of 0 is treated as rank 1 so operations that
    accept a dimension on scalars (`squeeze`) can name dims -1 and 0.
    """
    if rank <= 0:
        if not scalar_ok:
            raise DimensionOutOfRangeError(
                code=ErrorCode.DIM_OUT_OF_RANGE,
                message=(
                    f"dim out of range: {operation} got dim {dim} "
                    "but the tensor has no dimensions"
                ),
                help="0-dim tensors do not accept dimension arguments",
                related=("dimension wrapping",),
                data={"operation": operation, "dim": dim, "rank": rank},
            )
        rank = 1

    wrapped = dim + rank if dim < 0 else dim
    if wrapped < 0 or wrapped >= rank:
        raise DimensionOutOfRangeError(
            code=ErrorCode.DIM_OUT_OF_RANGE,
            message=(
                f"dim out of range: {operation} expected dim in range "
                f"[{-rank}, {rank - 1}], but got {dim}"
            ),
            help="pass a dimension index valid for the tensor rank",
            related=("dimension wrapping",),
            data={"operation": operation, "dim": dim, "rank": rank},
        )
    return wrapped


def is_legacy_empty(tensor: "Tensor", /) -> bool:
    """Return whether one tensor is the canonical empty tensor of shape `(0,)`."""
    return tensor.dim() == 1 and tensor.sizes[0] == 0


def legacy_cat_wrap_dim(
    dim: int, tensors: Sequence["Tensor"], *, operation: str = "cat"
) -> int:
    """Wrap `dim` against the first tensor that is not the canonical empty one."""
    for tensor in tensors:
        if is_legacy_empty(tensor):
            continue
        return wrap_dim(dim, tensor.dim(), operation=operation)
    return dim


__all__ = ["is_legacy_empty", "legacy_cat_wrap_dim", "wrap_dim"]
