from collections.abc import Sequence

from ..diagnostics import (
    DimensionOutOfRangeError,
    ErrorCode,
    InvalidArgumentError,
    RankError,
    RepeatedDimensionError,
    SizeMismatchError,
)
from ..tensor_types import Geometry, Shape
from .dims import wrap_dim


def contiguous_strides(sizes: Sequence[int]) -> Shape:
    """Return row-major strides; zero-size axes count as size 1."""
    strides: list[int] = []
    running = 1
    for size in reversed(sizes):
        strides.append(running)
        running *= max(size, 1)
    return tuple(reversed(strides))


def squeeze_geometry(geometry: Geometry) -> Geometry:
    """Drop every axis of size 1."""
    kept = [
        (size, stride)
        for size, stride in zip(geometry.sizes, geometry.strides)
        if size != 1
    ]
    return Geometry(
        sizes=tuple(size for size, _ in kept),
        strides=tuple(stride for _, stride in kept),
        storage_offset=geometry.storage_offset,
    )


def squeeze_dim_geometry(geometry: Geometry, dim: int) -> Geometry:
    """Drop axis `dim` when its size is 1; otherwise keep the geometry."""
    if geometry.dim == 0 or geometry.sizes[dim] != 1:
        return geometry
    return Geometry(
        sizes=geometry.sizes[:dim] + geometry.sizes[dim + 1 :],
        strides=geometry.strides[:dim] + geometry.strides[dim + 1 :],
        storage_offset=geometry.storage_offset,
    )


def unsqueeze_geometry(
    geometry: Geometry, dim: int, *, legacy_empty_shapes: bool
) -> Geometry:
    """Insert a size-1 axis at `dim` (already wrapped against rank + 1)."""
    if legacy_empty_shapes and geometry.numel() == 0:
        raise RankError(
            code=ErrorCode.RANK_MISMATCH,
            message="rank mismatch: cannot unsqueeze empty tensor",
            help="disable legacy_empty_shapes to unsqueeze zero-element tensors",
            related=("unsqueeze contract", "legacy empty shapes"),
            data={"operation": "unsqueeze", "dim": dim},
        )
    sizes = list(geometry.sizes)
    strides = list(geometry.strides)
    new_stride = 1 if dim >= geometry.dim else sizes[dim] * strides[dim]
    sizes.insert(dim, 1)
    strides.insert(dim, new_stride)
    return Geometry(tuple(sizes), tuple(strides), geometry.storage_offset)


def expand_geometry(geometry: Geometry, target_sizes: Sequence[int]) -> Geometry:
    """Broadcast `geometry` to `target_sizes` using zero strides.

    Axes are right-aligned; missing leading axes behave as size 1. A target
    of `-1` keeps the existing size.
    """
    ndim = len(target_sizes)
    tensor_dim = geometry.dim
    if ndim < tensor_dim:
        raise RankError(
            code=ErrorCode.RANK_MISMATCH,
            message=(
                f"rank mismatch: expand got {ndim} sizes for a "
                f"{tensor_dim}-dim tensor; the number of sizes must be at "
                "least the number of dimensions"
            ),
            help="pass at least one target size per tensor dimension",
            related=("expand contract",),
            data={"operation": "expand", "sizes": ndim, "rank": tensor_dim},
        )
    for axis, target in enumerate(target_sizes):
        if target < -1:
            raise InvalidArgumentError(
                code=ErrorCode.INVALID_ARGUMENT,
                message=f"invalid argument: expand got size {target} at dim {axis}",
                help="expand sizes must be non-negative or -1",
                related=("expand contract",),
                data={"operation": "expand", "dim": axis, "size": target},
            )
        if target == -1 and axis < ndim - tensor_dim:
            raise InvalidArgumentError(
                code=ErrorCode.INVALID_ARGUMENT,
                message=(
                    "invalid argument: expanded size -1 is not allowed in a "
                    "leading, non-existing dimension"
                ),
                help="spell out sizes for new leading dimensions",
                related=("expand contract",),
                data={"operation": "expand", "dim": axis},
            )

    if tensor_dim == 0:
        return Geometry(
            sizes=tuple(target_sizes),
            strides=(0,) * ndim,
            storage_offset=geometry.storage_offset,
        )

    expanded_sizes = [0] * ndim
    expanded_strides = [0] * ndim
    for index in range(ndim - 1, -1, -1):
        source_dim = tensor_dim - (ndim - index)
        if source_dim >= 0:
            size = geometry.sizes[source_dim]
            stride = geometry.strides[source_dim]
        else:
            size = 1
            stride = expanded_sizes[index + 1] * expanded_strides[index + 1]

        target = target_sizes[index]
        if target == -1:
            target = size

        if size != target:
            if size != 1:
                raise SizeMismatchError(
                    code=ErrorCode.BROADCAST_MISMATCH,
                    message=(
                        f"broadcast mismatch: the expanded size ({target}) must "
                        f"match the existing size ({size}) at non-singleton "
                        f"dimension {index}"
                    ),
                    help="only size-1 dimensions can be expanded",
                    related=("expand contract", "broadcast rule"),
                    data={
                        "operation": "expand",
                        "dim": index,
                        "size": size,
                        "target": target,
                    },
                )
            size = target
            stride = 0

        expanded_sizes[index] = size
        expanded_strides[index] = stride

    return Geometry(
        tuple(expanded_sizes), tuple(expanded_strides), geometry.storage_offset
    )


def diagonal_geometry(
    geometry: Geometry,
    offset: int,
    dim1: int,
    dim2: int,
    *,
    legacy_empty_shapes: bool,
) -> Geometry:
    """Return the diagonal view of two wrapped dims, appended as the last axis."""
    if dim1 == dim2:
        raise RepeatedDimensionError(
            code=ErrorCode.REPEATED_DIM,
            message=f"repeated dim: diagonal dimensions cannot be identical {dim1}, {dim2}",
            help="pass two distinct dimensions",
            related=("diagonal contract",),
            data={"operation": "diagonal", "dim1": dim1, "dim2": dim2},
        )
    size1 = geometry.sizes[dim1]
    size2 = geometry.sizes[dim2]
    if offset >= 0:
        diag_size = max(min(size1, size2 - offset), 0)
    else:
        diag_size = max(min(size1 + offset, size2), 0)
    if legacy_empty_shapes and diag_size == 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"invalid argument: invalid diagonal offset {offset}",
            help="disable legacy_empty_shapes to allow empty diagonals",
            related=("diagonal contract", "legacy empty shapes"),
            data={"operation": "diagonal", "offset": offset},
        )

    # Offsets past the end leave the storage offset untouched.
    storage_offset = geometry.storage_offset
    if diag_size == 0:
        pass
    elif offset >= 0:
        storage_offset += offset * geometry.strides[dim2]
    else:
        storage_offset -= offset * geometry.strides[dim1]

    dropped = (dim1, dim2)
    sizes = [
        size for axis, size in enumerate(geometry.sizes) if axis not in dropped
    ]
    strides = [
        stride for axis, stride in enumerate(geometry.strides) if axis not in dropped
    ]
    sizes.append(diag_size)
    strides.append(geometry.strides[dim1] + geometry.strides[dim2])
    return Geometry(tuple(sizes), tuple(strides), storage_offset)


def permute_geometry(geometry: Geometry, dims: Sequence[int]) -> Geometry:
    """Reorder axes by `dims`, which must name every axis exactly once."""
    rank = geometry.dim
    if len(dims) != rank:
        raise RankError(
            code=ErrorCode.RANK_MISMATCH,
            message=(
                f"rank mismatch: permute got {len(dims)} dims for a "
                f"{rank}-dim tensor"
            ),
            help="pass exactly one entry per tensor dimension",
            related=("permute contract",),
            data={"operation": "permute", "dims": len(dims), "rank": rank},
        )
    seen = [False] * rank
    sizes: list[int] = []
    strides: list[int] = []
    for requested in dims:
        dim = wrap_dim(requested, rank, operation="permute")
        if seen[dim]:
            raise RepeatedDimensionError(
                code=ErrorCode.REPEATED_DIM,
                message=f"repeated dim: permute uses dim {dim} more than once",
                help="pass a permutation of 0..rank-1",
                related=("permute contract",),
                data={"operation": "permute", "dim": dim},
            )
        seen[dim] = True
        sizes.append(geometry.sizes[dim])
        strides.append(geometry.strides[dim])
    return Geometry(tuple(sizes), tuple(strides), geometry.storage_offset)


def transpose_geometry(geometry: Geometry, dim0: int, dim1: int) -> Geometry:
    """Swap two wrapped axes."""
    if dim0 == dim1:
        return geometry
    sizes = list(geometry.sizes)
    strides = list(geometry.strides)
    sizes[dim0], sizes[dim1] = sizes[dim1], sizes[dim0]
    strides[dim0], strides[dim1] = strides[dim1], strides[dim0]
    return Geometry(tuple(sizes), tuple(strides), geometry.storage_offset)


def select_geometry(geometry: Geometry, dim: int, index: int) -> Geometry:
    """Drop axis `dim`, fixing it at `index` (negative wraps by axis size)."""
    size = geometry.sizes[dim]
    if index < -size or index >= size:
        raise DimensionOutOfRangeError(
            code=ErrorCode.INDEX_OUT_OF_RANGE,
            message=(
                f"index out of range: select() index {index} out of range for "
                f"tensor of size {geometry.sizes} at dimension {dim}"
            ),
            help="pass an index in [-size, size)",
            related=("select contract",),
            data={"operation": "select", "dim": dim, "index": index, "size": size},
        )
    if index < 0:
        index += size
    return Geometry(
        sizes=geometry.sizes[:dim] + geometry.sizes[dim + 1 :],
        strides=geometry.strides[:dim] + geometry.strides[dim + 1 :],
        storage_offset=geometry.storage_offset + index * geometry.strides[dim],
    )


def slice_geometry(
    geometry: Geometry, dim: int, start: int, end: int, step: int
) -> Geometry:
    """Return the `start:end:step` window of axis `dim`."""
    if step <= 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"invalid argument: slice step must be positive, got {step}",
            help="negative and zero slice steps are not supported",
            related=("slice contract",),
            data={"operation": "slice", "step": step},
        )
    size = geometry.sizes[dim]
    if start < 0:
        start += size
    if end < 0:
        end += size
    if start < 0:
        start = 0
    elif start >= size:
        start = size
    if end < start:
        end = start
    elif end >= size:
        end = size

    length = end - start
    sizes = list(geometry.sizes)
    strides = list(geometry.strides)
    storage_offset = geometry.storage_offset + start * strides[dim]
    sizes[dim] = (length + step - 1) // step
    strides[dim] *= step
    return Geometry(tuple(sizes), tuple(strides), storage_offset)


def unfold_geometry(geometry: Geometry, dim: int, size: int, step: int) -> Geometry:
    """Window axis `dim` into `size`-long slices every `step` elements.

    The window axis is appended last; a 0-dim input yields shape `(size,)`.
    """
    if step <= 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"invalid argument: unfold step must be positive, got {step}",
            help="pass a positive step",
            related=("unfold contract",),
            data={"operation": "unfold", "step": step},
        )
    axis_size = geometry.sizes[dim] if geometry.dim > 0 else 1
    if size < 0 or size > axis_size:
        raise SizeMismatchError(
            code=ErrorCode.SIZE_MISMATCH,
            message=(
                f"size mismatch: unfold window size {size} exceeds size "
                f"{axis_size} at dimension {dim}"
            ),
            help="pass a window size no larger than the dimension",
            related=("unfold contract",),
            data={"operation": "unfold", "dim": dim, "size": size},
        )
    if geometry.dim == 0:
        return Geometry((size,), (1,), geometry.storage_offset)

    sizes = list(geometry.sizes)
    strides = list(geometry.strides)
    old_stride = strides[dim]
    sizes[dim] = (axis_size - size) // step + 1
    strides[dim] = old_stride * step
    sizes.append(size)
    strides.append(old_stride)
    return Geometry(tuple(sizes), tuple(strides), geometry.storage_offset)


__all__ = [
    "contiguous_strides",
    "diagonal_geometry",
    "expand_geometry",
    "permute_geometry",
    "select_geometry",
    "slice_geometry",
    "squeeze_dim_geometry",
    "squeeze_geometry",
    "transpose_geometry",
    "unfold_geometry",
    "unsqueeze_geometry",
]
