"""Constructors and array-API interop for tensor handles."""

from collections.abc import Sequence
from typing import Protocol

import numpy as np
from array_api_compat import array_namespace
from numpy.typing import ArrayLike, DTypeLike, NDArray

from .tensor import SparseTensor, Tensor

_BACKEND_FAMILY_CANONICAL: dict[str, str] = {
    "numpy": "numpy",
    "torch": "torch",
    "jax": "jax",
    "cupy": "cupy",
    "dask": "dask",
}


class ArrayNamespaceLike(Protocol):
    """Minimal Array API namespace protocol."""

    __name__: str


def derive_namespace_id(namespace: ArrayNamespaceLike) -> str:
    """Derive stable namespace identifier for modules and class-like namespaces."""
    namespace_name = getattr(namespace, "__name__", None)
    if not isinstance(namespace_name, str):
        raise TypeError("array namespace must define string __name__")

    stripped_name = namespace_name.strip()
    if not stripped_name:
        raise TypeError("array namespace __name__ cannot be empty")
    if "." in stripped_name:
        return stripped_name

    namespace_module = getattr(namespace, "__module__", None)
    if not isinstance(namespace_module, str) or not namespace_module.strip():
        return stripped_name
    return f"{namespace_module.strip()}.{stripped_name}"


def infer_backend_family(namespace_id: str) -> str | None:
    """Infer canonical backend family from namespace identifier."""
    normalized_namespace_id = namespace_id.removeprefix("array_api_compat.")
    candidate = normalized_namespace_id.split(".")[0]
    return _BACKEND_FAMILY_CANONICAL.get(candidate)


def from_array(array: object) -> Tensor:
    """Copy any Array API array into a new contiguous tensor.

    NumPy arrays are read directly; other namespaces are imported through
    DLPack, which requires host-resident memory.
    """
    namespace = array_namespace(array)
    backend_family = infer_backend_family(derive_namespace_id(namespace))
    if backend_family == "numpy":
        host: NDArray = np.asarray(array)
    else:
        host = np.from_dlpack(array)
    return Tensor.from_numpy(host)


def to_numpy(tensor: Tensor) -> NDArray:
    """Return a numpy copy of `tensor`'s contents."""
    return tensor.numpy().copy()


def tensor(values: ArrayLike, dtype: DTypeLike = None) -> Tensor:
    """Build a contiguous tensor from nested sequences or scalars."""
    return Tensor.from_numpy(np.array(values, dtype=dtype))


def arange(n: int, dtype: DTypeLike = None) -> Tensor:
    return Tensor.from_numpy(np.arange(n, dtype=dtype))


def sparse_coo_tensor(
    indices: ArrayLike, values: ArrayLike, sizes: Sequence[int]
) -> SparseTensor:
    """Build a coordinate sparse tensor from `(sparse_dims, nnz)` indices."""
    index_array = np.array(indices, dtype=np.int64)
    if index_array.ndim == 1 and index_array.size == 0:
        index_array = index_array.reshape(len(sizes), 0)
    return SparseTensor(
        Tensor.from_numpy(index_array),
        Tensor.from_numpy(np.array(values)),
        sizes,
    )


__all__ = [
    "arange",
    "derive_namespace_id",
    "from_array",
    "infer_backend_family",
    "sparse_coo_tensor",
    "tensor",
    "to_numpy",
]
