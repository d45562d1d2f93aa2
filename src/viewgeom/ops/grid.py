from collections.abc import Sequence

from ..diagnostics import EmptyListError, ErrorCode, RankError
from ..tensor import Tensor
from ..tensor_types import Geometry
from .checks import require_strided
from .views import expand, view_from_geometry


def meshgrid(tensors: Sequence[Tensor]) -> list[Tensor]:
    """Broadcast N scalar or 1-D inputs to N aliasing coordinate grids.

    Grid `i` varies along axis `i` only; no data is duplicated.
    """
    if not tensors:
        raise EmptyListError(
            code=ErrorCode.EMPTY_TENSOR_LIST,
            message="empty tensor list: meshgrid expects a non-empty TensorList",
            help="pass at least one tensor to meshgrid",
            related=("meshgrid contract",),
            data={"operation": "meshgrid"},
        )

    count = len(tensors)
    shape: list[int] = []
    for position, tensor in enumerate(tensors):
        require_strided(tensor, operation="meshgrid")
        if tensor.dim() > 1:
            raise RankError(
                code=ErrorCode.RANK_MISMATCH,
                message=(
                    "rank mismatch: expected scalar or 1D tensor in the tensor "
                    f"list but got a {tensor.dim()}D tensor at position {position}"
                ),
                help="pass only scalars and 1-D tensors to meshgrid",
                related=("meshgrid contract",),
                data={"operation": "meshgrid", "position": position, "rank": tensor.dim()},
            )
        shape.append(1 if tensor.dim() == 0 else tensor.sizes[0])

    grids: list[Tensor] = []
    for position, tensor in enumerate(tensors):
        stride = 1 if tensor.dim() == 0 else tensor.strides[0]
        unit_sizes = [1] * count
        unit_strides = [1] * count
        unit_sizes[position] = shape[position]
        unit_strides[position] = stride
        unit = view_from_geometry(
            tensor,
            Geometry(tuple(unit_sizes), tuple(unit_strides), tensor.storage_offset),
            op="meshgrid",
        )
        grids.append(expand(unit, shape))
    return grids


__all__ = ["meshgrid"]
