from ..diagnostics import ErrorCode, RankError
from ..storage import resolve_layout_policy
from ..tensor_types import TensorHandle


def require_strided(tensor: TensorHandle, /, *, operation: str) -> None:
    """Fail unless `tensor` has a stride-addressable layout."""
    resolve_layout_policy(tensor.layout).require_strides(operation=operation)


def require_nonscalar(tensor: TensorHandle, /, *, operation: str) -> None:
    """Fail when `tensor` is 0-dimensional."""
    if tensor.dim() > 0:
        return
    raise RankError(
        code=ErrorCode.RANK_MISMATCH,
        message=f"rank mismatch: {operation}() cannot be applied to a 0-dim tensor",
        help=f"{operation} expects at least a 1-dimensional tensor",
        related=(f"{operation} contract",),
        data={"operation": operation, "rank": 0},
    )


__all__ = ["require_nonscalar", "require_strided"]
