from collections.abc import Sequence
from math import prod

import numpy as np
from numpy.lib.stride_tricks import as_strided as _numpy_as_strided
from numpy.typing import NDArray

from .diagnostics import (
    ErrorCode,
    InvalidArgumentError,
    RankError,
    SizeMismatchError,
)
from .geometry.dims import wrap_dim
from .geometry.infer import contiguous_strides
from .storage import Layout, Storage
from .tensor_types import Geometry, Shape, ViewMeta


def _as_int_tuple(values: Sequence[int], *, name: str) -> Shape:
    normalized: list[int] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int | np.integer):
            raise TypeError(f"{name} entries must be integers, got {value!r}")
        normalized.append(int(value))
    return tuple(normalized)


def validate_geometry(
    sizes: Shape,
    strides: Shape,
    storage_offset: int,
    *,
    operation: str,
    storage_size: int | None = None,
) -> None:
    """Validate one `(sizes, strides, storage_offset)` triple before use.

    With `storage_size`, every element the geometry addresses must also lie
    inside a buffer of that many elements.
    """
    if len(sizes) != len(strides):
        raise SizeMismatchError(
            code=ErrorCode.SIZE_MISMATCH,
            message=(
                f"size mismatch: {operation} got {len(sizes)} sizes "
                f"but {len(strides)} strides"
            ),
            help="pass one stride per size",
            related=(f"{operation} geometry",),
            data={
                "operation": operation,
                "sizes": len(sizes),
                "strides": len(strides),
            },
        )
    for axis, size in enumerate(sizes):
        if size < 0:
            raise InvalidArgumentError(
                code=ErrorCode.INVALID_ARGUMENT,
                message=f"invalid argument: {operation} got negative size {size} at dim {axis}",
                help="sizes must be non-negative",
                related=(f"{operation} geometry",),
                data={"operation": operation, "dim": axis, "size": size},
            )
    if storage_offset < 0:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARGUMENT,
            message=(
                f"invalid argument: {operation} got negative storage offset "
                f"{storage_offset}"
            ),
            help="storage offsets must be non-negative",
            related=(f"{operation} geometry",),
            data={"operation": operation, "storage_offset": storage_offset},
        )
    if storage_size is None or prod(sizes, start=1) == 0:
        return

    lowest = highest = storage_offset
    for size, stride in zip(sizes, strides):
        if stride < 0:
            lowest += (size - 1) * stride
        else:
            highest += (size - 1) * stride
    if lowest < 0 or highest >= storage_size:
        raise InvalidArgumentError(
            code=ErrorCode.STORAGE_OUT_OF_BOUNDS,
            message=(
                f"storage out of bounds: {operation} geometry addresses "
                f"elements [{lowest}, {highest}] of a storage with "
                f"{storage_size} elements"
            ),
            help="keep every addressed element inside the underlying storage",
            related=(f"{operation} geometry",),
            data={
                "operation": operation,
                "lowest": lowest,
                "highest": highest,
                "storage_size": storage_size,
            },
        )


class Tensor:
    """Strided view descriptor over one shared `Storage`."""

    __slots__ = (
        "_storage",
        "_sizes",
        "_strides",
        "_storage_offset",
        "_base",
        "_view_meta",
    )

    def __init__(
        self,
        storage: Storage,
        sizes: Sequence[int],
        strides: Sequence[int] | None = None,
        storage_offset: int = 0,
        *,
        base: "Tensor | None" = None,
        view_meta: ViewMeta | None = None,
    ) -> None:
        if not isinstance(storage, Storage):
            raise TypeError("tensor storage must be a Storage")
        normalized_sizes = _as_int_tuple(sizes, name="sizes")
        normalized_strides = (
            contiguous_strides(normalized_sizes)
            if strides is None
            else _as_int_tuple(strides, name="strides")
        )
        validate_geometry(
            normalized_sizes,
            normalized_strides,
            int(storage_offset),
            operation="tensor",
            storage_size=len(storage),
        )
        self._storage = storage
        self._sizes = normalized_sizes
        self._strides = normalized_strides
        self._storage_offset = int(storage_offset)
        self._base = base
        self._view_meta = view_meta

    @classmethod
    def from_numpy(cls, array: NDArray, /) -> "Tensor":
        """Copy one numpy array into a fresh contiguous tensor."""
        contiguous = np.array(array, copy=True, order="C")
        return cls(Storage(contiguous.reshape(-1)), contiguous.shape)

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def sizes(self) -> Shape:
        return self._sizes

    @property
    def shape(self) -> Shape:
        return self._sizes

    @property
    def strides(self) -> Shape:
        return self._strides

    @property
    def storage_offset(self) -> int:
        return self._storage_offset

    @property
    def geometry(self) -> Geometry:
        return Geometry(self._sizes, self._strides, self._storage_offset)

    @property
    def layout(self) -> Layout:
        return Layout.STRIDED

    @property
    def dtype(self) -> np.dtype:
        return self._storage.dtype

    @property
    def base(self) -> "Tensor | None":
        """Root handle whose storage this view aliases, or None."""
        return self._base

    @property
    def is_view(self) -> bool:
        return self._base is not None

    @property
    def view_meta(self) -> ViewMeta | None:
        return self._view_meta

    def dim(self) -> int:
        return len(self._sizes)

    def numel(self) -> int:
        return prod(self._sizes, start=1)

    def size(self, dim: int) -> int:
        return self._sizes[self._wrap(dim, operation="size")]

    def stride(self, dim: int) -> int:
        return self._strides[self._wrap(dim, operation="stride")]

    def _wrap(self, dim: int, *, operation: str) -> int:
        if not self._sizes:
            raise RankError(
                code=ErrorCode.RANK_MISMATCH,
                message=f"rank mismatch: {operation}() cannot index a 0-dim tensor",
                help="0-dim tensors have no dimensions",
                related=(f"{operation} contract",),
                data={"operation": operation},
            )
        return wrap_dim(dim, len(self._sizes), operation=operation)

    def is_contiguous(self) -> bool:
        """Return whether the handle addresses storage in row-major order."""
        if self.numel() == 0:
            return True
        expected = 1
        for size, stride in zip(reversed(self._sizes), reversed(self._strides)):
            if size == 1:
                continue
            if stride != expected:
                return False
            expected *= size
        return True

    def set_geometry_(self, geometry: Geometry, /) -> "Tensor":
        """Replace this handle's geometry in place."""
        return self.set_storage_(self._storage, geometry)

    def set_storage_(self, storage: Storage, geometry: Geometry, /) -> "Tensor":
        """Point this handle at `storage` with `geometry`, validated first."""
        validate_geometry(
            geometry.sizes,
            geometry.strides,
            geometry.storage_offset,
            operation="as_strided_",
            storage_size=len(storage),
        )
        self._storage = storage
        self._sizes = geometry.sizes
        self._strides = geometry.strides
        self._storage_offset = geometry.storage_offset
        return self

    def numpy(self) -> NDArray:
        """Return a numpy array aliasing this handle's memory."""
        data = self._storage.data
        if self.numel() == 0:
            return data[:0].reshape(self._sizes)
        itemsize = self._storage.itemsize
        return _numpy_as_strided(
            data[self._storage_offset :],
            shape=self._sizes,
            strides=tuple(stride * itemsize for stride in self._strides),
            writeable=True,
        )

    def tolist(self) -> object:
        return self.numpy().tolist()

    def item(self) -> object:
        if self.numel() != 1:
            raise SizeMismatchError(
                code=ErrorCode.NUMEL_MISMATCH,
                message=(
                    "numel mismatch: item() requires exactly one element, "
                    f"got {self.numel()}"
                ),
                help="select a single element before calling item()",
                related=("item contract",),
                data={"operation": "item", "numel": self.numel()},
            )
        return self.numpy().reshape(-1)[0].item()

    def __repr__(self) -> str:
        return (
            f"Tensor(sizes={self._sizes}, strides={self._strides}, "
            f"storage_offset={self._storage_offset}, dtype={self.dtype})"
        )


class SparseTensor:
    """Coordinate-format sparse tensor: index rows plus per-entry values.

    `indices` has shape `(sparse_dims, nnz)` and `values` has shape
    `(nnz, *dense_sizes)`. There is no stride concept for this layout.
    """

    __slots__ = ("_indices", "_values", "_sizes", "_sparse_dims", "_dense_dims")

    def __init__(self, indices: Tensor, values: Tensor, sizes: Sequence[int]) -> None:
        normalized_sizes = _as_int_tuple(sizes, name="sizes")
        if indices.dim() != 2:
            raise RankError(
                code=ErrorCode.RANK_MISMATCH,
                message=(
                    "rank mismatch: sparse indices must be 2-D "
                    f"(sparse_dims, nnz), got {indices.dim()}-D"
                ),
                help="pass indices shaped (sparse_dims, nnz)",
                related=("sparse tensor construction",),
                data={"operation": "sparse_coo_tensor", "rank": indices.dim()},
            )
        if values.dim() < 1 or values.size(0) != indices.size(1):
            raise SizeMismatchError(
                code=ErrorCode.SIZE_MISMATCH,
                message=(
                    "size mismatch: sparse values must have one leading entry "
                    "per index column"
                ),
                help="pass values shaped (nnz, *dense_sizes)",
                related=("sparse tensor construction",),
                data={"operation": "sparse_coo_tensor", "nnz": indices.size(1)},
            )
        sparse_dims = indices.size(0)
        dense_dims = values.dim() - 1
        if sparse_dims + dense_dims != len(normalized_sizes):
            raise SizeMismatchError(
                code=ErrorCode.SIZE_MISMATCH,
                message=(
                    f"size mismatch: sparse tensor has {sparse_dims} sparse and "
                    f"{dense_dims} dense dims but {len(normalized_sizes)} sizes"
                ),
                help="sizes must cover every sparse and dense dimension",
                related=("sparse tensor construction",),
                data={"operation": "sparse_coo_tensor", "rank": len(normalized_sizes)},
            )
        self._indices = indices
        self._values = values
        self._sizes = normalized_sizes
        self._sparse_dims = sparse_dims
        self._dense_dims = dense_dims

    @property
    def sizes(self) -> Shape:
        return self._sizes

    @property
    def shape(self) -> Shape:
        return self._sizes

    @property
    def layout(self) -> Layout:
        return Layout.SPARSE_COO

    @property
    def indices(self) -> Tensor:
        return self._indices

    @property
    def values(self) -> Tensor:
        return self._values

    def dim(self) -> int:
        return len(self._sizes)

    def numel(self) -> int:
        return prod(self._sizes, start=1)

    def sparse_dims(self) -> int:
        return self._sparse_dims

    def dense_dims(self) -> int:
        return self._dense_dims

    def sparse_raw_resize_(
        self, sizes: Sequence[int], sparse_dims: int, dense_dims: int
    ) -> "SparseTensor":
        """Replace the shape in place; `-1` keeps the current dim split."""
        normalized_sizes = _as_int_tuple(sizes, name="sizes")
        new_sparse_dims = self._sparse_dims if sparse_dims == -1 else sparse_dims
        new_dense_dims = self._dense_dims if dense_dims == -1 else dense_dims
        if new_sparse_dims + new_dense_dims != len(normalized_sizes):
            raise SizeMismatchError(
                code=ErrorCode.SIZE_MISMATCH,
                message=(
                    f"size mismatch: {len(normalized_sizes)} sizes cannot hold "
                    f"{new_sparse_dims} sparse and {new_dense_dims} dense dims"
                ),
                help="keep sparse_dims + dense_dims equal to the number of sizes",
                related=("sparse resize",),
                data={"operation": "sparse_raw_resize_"},
            )
        self._sizes = normalized_sizes
        self._sparse_dims = new_sparse_dims
        self._dense_dims = new_dense_dims
        return self

    def clone(self) -> "SparseTensor":
        return SparseTensor(
            Tensor.from_numpy(self._indices.numpy()),
            Tensor.from_numpy(self._values.numpy()),
            self._sizes,
        )

    def to_dense(self) -> Tensor:
        """Materialize the dense equivalent, summing duplicate coordinates."""
        dense = np.zeros(self._sizes, dtype=self._values.dtype)
        index_rows = self._indices.numpy().astype(np.intp, copy=False)
        np.add.at(dense, tuple(index_rows), self._values.numpy())
        return Tensor.from_numpy(dense)

    def __repr__(self) -> str:
        return (
            f"SparseTensor(sizes={self._sizes}, sparse_dims={self._sparse_dims}, "
            f"dense_dims={self._dense_dims}, nnz={self._indices.size(1)})"
        )


__all__ = ["SparseTensor", "Tensor", "validate_geometry"]
