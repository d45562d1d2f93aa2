"""Operations that allocate new storage and copy: cat, stack, repeat.

No stride layout can express these results, so each one allocates a fresh
contiguous buffer and fills it through views of that buffer.
"""

import logging
from collections.abc import Sequence
from math import prod

import numpy as np
from numpy.typing import DTypeLike

from ..diagnostics import (
    EmptyListError,
    ErrorCode,
    InvalidArgumentError,
    RankError,
    SizeMismatchError,
)
from ..geometry import contiguous_strides, is_legacy_empty, legacy_cat_wrap_dim, wrap_dim
from ..storage import Storage
from ..tensor import Tensor
from ..tensor_types import Geometry, Shape
from .checks import require_strided
from .decompose import narrow
from .views import as_strided, diagonal, expand, expand_as, unfold, unsqueeze

logger = logging.getLogger(__name__)


def empty(sizes: Sequence[int], dtype: DTypeLike = None) -> Tensor:
    """Allocate an uninitialised contiguous tensor."""
    shape = tuple(sizes)
    logger.debug("allocating storage for shape %s", shape)
    return Tensor(Storage.allocate(prod(shape, start=1), dtype), shape)


def zeros(sizes: Sequence[int], dtype: DTypeLike = None) -> Tensor:
    """Allocate a zero-filled contiguous tensor."""
    shape = tuple(sizes)
    logger.debug("allocating zeroed storage for shape %s", shape)
    return Tensor(Storage.zeros(prod(shape, start=1), dtype), shape)


def clone(tensor: Tensor) -> Tensor:
    """Copy `tensor` into fresh contiguous storage."""
    require_strided(tensor, operation="clone")
    logger.debug("cloning tensor of shape %s", tensor.sizes)
    return Tensor.from_numpy(tensor.numpy())


def contiguous(tensor: Tensor) -> Tensor:
    """Return `tensor` itself when contiguous, else a contiguous copy."""
    require_strided(tensor, operation="contiguous")
    if tensor.is_contiguous():
        return tensor
    return clone(tensor)


def copy_(destination: Tensor, source: Tensor) -> Tensor:
    """Write `source`, broadcast to `destination`'s shape, into `destination`."""
    require_strided(destination, operation="copy_")
    require_strided(source, operation="copy_")
    if source.sizes != destination.sizes:
        source = expand(source, destination.sizes, implicit=True)
    destination.numpy()[...] = source.numpy()
    return destination


def _resize_(tensor: Tensor, sizes: Shape) -> Tensor:
    """Give `tensor` contiguous geometry `sizes`, growing its storage if needed."""
    strides = contiguous_strides(sizes)
    numel = prod(sizes, start=1)
    if len(tensor.storage) >= tensor.storage_offset + numel:
        return tensor.set_geometry_(Geometry(sizes, strides, tensor.storage_offset))
    logger.debug("growing output storage to %d elements", numel)
    return tensor.set_storage_(
        Storage.allocate(numel, tensor.dtype), Geometry(sizes, strides, 0)
    )


def _empty_list_error(operation: str) -> EmptyListError:
    return EmptyListError(
        code=ErrorCode.EMPTY_TENSOR_LIST,
        message=f"empty tensor list: {operation} expects a non-empty TensorList",
        help=f"pass at least one tensor to {operation}",
        related=(f"{operation} contract",),
        data={"operation": operation},
    )


def _plan_cat(
    tensors: Sequence[Tensor], dim: int, *, operation: str
) -> tuple[list[Tensor], int, Shape]:
    """Validate cat inputs; return the non-empty inputs, wrapped dim, result shape."""
    if not tensors:
        raise _empty_list_error(operation)
    for position, tensor in enumerate(tensors):
        require_strided(tensor, operation=operation)
        if tensor.dim() == 0:
            raise RankError(
                code=ErrorCode.RANK_MISMATCH,
                message=(
                    f"rank mismatch: zero-dimensional tensor (at position "
                    f"{position}) cannot be concatenated"
                ),
                help="unsqueeze scalars before concatenating them",
                related=(f"{operation} contract",),
                data={"operation": operation, "position": position},
            )

    dim = legacy_cat_wrap_dim(dim, tensors, operation=operation)
    # The canonical empty tensor (0,) concatenates with anything.
    inputs = [tensor for tensor in tensors if not is_legacy_empty(tensor)]
    if not inputs:
        return [], dim, (0,)

    reference = inputs[0]
    for position, tensor in enumerate(tensors):
        if is_legacy_empty(tensor):
            continue
        if tensor.dim() != reference.dim():
            raise SizeMismatchError(
                code=ErrorCode.SIZE_MISMATCH,
                message=(
                    f"size mismatch: tensors must have same number of dimensions: "
                    f"got {reference.dim()} and {tensor.dim()} (at position {position})"
                ),
                help="concatenate tensors of equal rank",
                related=(f"{operation} contract",),
                data={"operation": operation, "position": position},
            )
        for axis in range(reference.dim()):
            if axis != dim and tensor.sizes[axis] != reference.sizes[axis]:
                raise SizeMismatchError(
                    code=ErrorCode.SIZE_MISMATCH,
                    message=(
                        f"size mismatch: sizes of tensors must match except in "
                        f"dimension {dim}. Got {reference.sizes[axis]} and "
                        f"{tensor.sizes[axis]} in dimension {axis} "
                        f"(at position {position})"
                    ),
                    help="make every non-concatenated dimension agree",
                    related=(f"{operation} contract",),
                    data={
                        "operation": operation,
                        "dim": axis,
                        "position": position,
                    },
                )

    sizes = list(reference.sizes)
    sizes[dim] = sum(tensor.sizes[dim] for tensor in inputs)
    return inputs, dim, tuple(sizes)


def _copy_segments(result: Tensor, inputs: Sequence[Tensor], dim: int) -> Tensor:
    start = 0
    for tensor in inputs:
        length = tensor.sizes[dim]
        if length:
            copy_(narrow(result, dim, start, length), tensor)
        start += length
    return result


def cat(tensors: Sequence[Tensor], dim: int = 0) -> Tensor:
    """Concatenate `tensors` along `dim` into new storage."""
    inputs, dim, sizes = _plan_cat(tensors, dim, operation="cat")
    dtype = np.result_type(*(tensor.dtype for tensor in tensors))
    return _copy_segments(empty(sizes, dtype), inputs, dim)


def cat_out(result: Tensor, tensors: Sequence[Tensor], dim: int = 0) -> Tensor:
    """Concatenate into `result`, resizing it in place."""
    require_strided(result, operation="cat_out")
    inputs, dim, sizes = _plan_cat(tensors, dim, operation="cat_out")
    for position, tensor in enumerate(tensors):
        if tensor.storage is result.storage:
            raise InvalidArgumentError(
                code=ErrorCode.OUTPUT_ALIASES_INPUT,
                message=(
                    "output aliases input: cat_out result shares storage with "
                    f"the input at position {position}"
                ),
                help="pass an output tensor that does not alias any input",
                related=("cat_out contract",),
                data={"operation": "cat_out", "position": position},
            )
    _resize_(result, sizes)
    return _copy_segments(result, inputs, dim)


def _stack_inputs(
    tensors: Sequence[Tensor], dim: int, *, operation: str
) -> tuple[list[Tensor], int]:
    if not tensors:
        raise _empty_list_error(operation)
    reference = tensors[0]
    dim = wrap_dim(dim, reference.dim() + 1, operation=operation)
    for position, tensor in enumerate(tensors):
        require_strided(tensor, operation=operation)
        if tensor.sizes != reference.sizes:
            raise SizeMismatchError(
                code=ErrorCode.SIZE_MISMATCH,
                message=(
                    f"size mismatch: {operation} expects each tensor to be equal "
                    f"size, but got {reference.sizes} at position 0 and "
                    f"{tensor.sizes} at position {position}"
                ),
                help="stack tensors of identical shape",
                related=(f"{operation} contract",),
                data={"operation": operation, "position": position},
            )
    return [unsqueeze(tensor, dim) for tensor in tensors], dim


def stack(tensors: Sequence[Tensor], dim: int = 0) -> Tensor:
    """Join equally shaped tensors along a new axis `dim`."""
    inputs, dim = _stack_inputs(tensors, dim, operation="stack")
    return cat(inputs, dim)


def stack_out(result: Tensor, tensors: Sequence[Tensor], dim: int = 0) -> Tensor:
    inputs, dim = _stack_inputs(tensors, dim, operation="stack_out")
    return cat_out(result, inputs, dim)


def repeat(tensor: Tensor, repeats: Sequence[int]) -> Tensor:
    """Tile `tensor` `repeats[i]` times along each (left-padded) axis."""
    require_strided(tensor, operation="repeat")
    repeats = tuple(repeats)
    if len(repeats) < tensor.dim():
        raise RankError(
            code=ErrorCode.RANK_MISMATCH,
            message=(
                "rank mismatch: number of dimensions of repeat dims can not be "
                "smaller than number of dimensions of tensor"
            ),
            help="pass one repeat count per tensor dimension (or more)",
            related=("repeat contract",),
            data={"operation": "repeat", "repeats": len(repeats), "rank": tensor.dim()},
        )
    if any(count < 0 for count in repeats):
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"invalid argument: repeat counts must be non-negative, got {list(repeats)}",
            help="pass non-negative repeat counts",
            related=("repeat contract",),
            data={"operation": "repeat"},
        )

    padded_sizes = (1,) * (len(repeats) - tensor.dim()) + tensor.sizes
    target_sizes = tuple(size * count for size, count in zip(padded_sizes, repeats))
    expanded = expand(tensor, padded_sizes)
    result = empty(target_sizes, tensor.dtype)
    if result.numel() == 0:
        return result

    # Window each result axis into (repeat, size) so the expanded input
    # broadcasts over every tile at once.
    tiles = as_strided(result, result.sizes, result.strides)
    for axis in range(expanded.dim()):
        size = expanded.sizes[axis]
        tiles = unfold(tiles, axis, size, max(size, 1))
    copy_(tiles, expand_as(expanded, tiles))
    return result


def diagflat(tensor: Tensor, offset: int = 0) -> Tensor:
    """Place the flattened `tensor` on diagonal `offset` of a new square matrix."""
    require_strided(tensor, operation="diagflat")
    values = Tensor.from_numpy(tensor.numpy().reshape(-1))
    side = values.numel() + abs(offset)
    result = zeros((side, side), tensor.dtype)
    if values.numel() == 0:
        return result
    copy_(diagonal(result, offset), values)
    return result


__all__ = [
    "cat",
    "cat_out",
    "clone",
    "contiguous",
    "copy_",
    "diagflat",
    "empty",
    "repeat",
    "stack",
    "stack_out",
    "zeros",
]
