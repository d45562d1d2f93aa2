"""Axis reordering: permute, transpose and the 2-D shorthand `t`."""

from collections.abc import Callable, Sequence
from typing import TypeAlias

from ..diagnostics import ErrorCode, RankError, UnsupportedLayoutError
from ..geometry import permute_geometry, transpose_geometry, wrap_dim
from ..storage import Layout
from ..tensor import SparseTensor, Tensor
from .checks import require_strided
from .decompose import select
from .materialize import clone, copy_
from .views import view_from_geometry

AnyTensor: TypeAlias = Tensor | SparseTensor
TransposeFn: TypeAlias = Callable[..., AnyTensor]


def permute(tensor: Tensor, dims: Sequence[int]) -> Tensor:
    """Reorder axes so that output axis `i` is input axis `dims[i]`."""
    require_strided(tensor, operation="permute")
    geometry = permute_geometry(tensor.geometry, tuple(dims))
    return view_from_geometry(tensor, geometry, op="permute")


def _strided_transpose(
    tensor: Tensor, dim0: int, dim1: int, *, inplace: bool
) -> Tensor:
    geometry = transpose_geometry(tensor.geometry, dim0, dim1)
    if inplace:
        return tensor.set_geometry_(geometry)
    return view_from_geometry(tensor, geometry, op="transpose")


def _swap_sparse_dims_(tensor: SparseTensor, dim0: int, dim1: int) -> SparseTensor:
    """Swap two sparse dims by exchanging their index rows in place."""
    sizes = list(tensor.sizes)
    sizes[dim0], sizes[dim1] = sizes[dim1], sizes[dim0]
    indices = tensor.indices
    if indices.numel() == 0 and tensor.values.numel() == 0:
        return tensor.sparse_raw_resize_(
            sizes, tensor.sparse_dims(), tensor.dense_dims()
        )

    row0 = select(indices, 0, dim0)
    row1 = select(indices, 0, dim1)
    saved = clone(row0)
    copy_(row0, row1)
    copy_(row1, saved)
    return tensor.sparse_raw_resize_(sizes, -1, -1)


def _sparse_transpose(
    tensor: SparseTensor, dim0: int, dim1: int, *, inplace: bool
) -> SparseTensor:
    sparse_dims = tensor.sparse_dims()
    if dim0 >= sparse_dims or dim1 >= sparse_dims:
        raise UnsupportedLayoutError(
            code=ErrorCode.UNSUPPORTED_LAYOUT,
            message=(
                "unsupported layout: sparse transpose dimensions must be sparse. "
                f"Got sparse_dims: {sparse_dims}, d0: {dim0}, d1: {dim1}"
            ),
            help="transpose only sparse dimensions of a coordinate tensor",
            related=("sparse transpose",),
            data={
                "operation": "transpose",
                "sparse_dims": sparse_dims,
                "dim0": dim0,
                "dim1": dim1,
            },
        )
    target = tensor if inplace else tensor.clone()
    return _swap_sparse_dims_(target, dim0, dim1)


_TRANSPOSE_BY_LAYOUT: dict[Layout, TransposeFn] = {
    Layout.STRIDED: _strided_transpose,
    Layout.SPARSE_COO: _sparse_transpose,
}


def _transpose(
    tensor: AnyTensor, dim0: int, dim1: int, *, inplace: bool, operation: str
) -> AnyTensor:
    rank = tensor.dim()
    dim0 = wrap_dim(dim0, rank, operation=operation)
    dim1 = wrap_dim(dim1, rank, operation=operation)
    if dim0 == dim1:
        return tensor
    transpose_fn = _TRANSPOSE_BY_LAYOUT[tensor.layout]
    return transpose_fn(tensor, dim0, dim1, inplace=inplace)


def transpose(tensor: AnyTensor, dim0: int, dim1: int) -> AnyTensor:
    """Swap two axes; sparse tensors are transposed on a copy."""
    return _transpose(tensor, dim0, dim1, inplace=False, operation="transpose")


def transpose_(tensor: AnyTensor, dim0: int, dim1: int) -> AnyTensor:
    """Swap two axes of `tensor` in place."""
    return _transpose(tensor, dim0, dim1, inplace=True, operation="transpose_")


def _check_t(tensor: AnyTensor, *, operation: str) -> None:
    if isinstance(tensor, SparseTensor):
        sparse_dims = tensor.sparse_dims()
        dense_dims = tensor.dense_dims()
        if sparse_dims == 2 and dense_dims == 0:
            return
        raise RankError(
            code=ErrorCode.RANK_MISMATCH,
            message=(
                f"rank mismatch: {operation}() expects a tensor with 2 sparse and "
                f"0 dense dimensions, but got {sparse_dims} sparse and "
                f"{dense_dims} dense dimensions"
            ),
            help="use transpose() for other sparse shapes",
            related=(f"{operation} contract",),
            data={
                "operation": operation,
                "sparse_dims": sparse_dims,
                "dense_dims": dense_dims,
            },
        )
    if tensor.dim() != 2:
        raise RankError(
            code=ErrorCode.RANK_MISMATCH,
            message=(
                f"rank mismatch: {operation}() expects a 2D tensor, but self is "
                f"{tensor.dim()}D"
            ),
            help="use transpose() or permute() for other ranks",
            related=(f"{operation} contract",),
            data={"operation": operation, "rank": tensor.dim()},
        )


def t(tensor: AnyTensor) -> AnyTensor:
    _check_t(tensor, operation="t")
    return transpose(tensor, 0, 1)


def t_(tensor: AnyTensor) -> AnyTensor:
    _check_t(tensor, operation="t_")
    return transpose_(tensor, 0, 1)


__all__ = ["permute", "t", "t_", "transpose", "transpose_"]
