from collections.abc import Iterable

import numpy as np
from numpy.typing import DTypeLike, NDArray

DEFAULT_DTYPE = np.dtype(np.float64)


class Storage:
    """Flat element buffer shared by reference between tensor handles.

    Every view derived from a handle holds the same `Storage` object, so writes
    through one handle are visible through all others. The buffer lives as
    long as any handle references it.
    """

    __slots__ = ("_data", "__weakref__")

    def __init__(self, data: NDArray, /) -> None:
        if not isinstance(data, np.ndarray):
            raise TypeError("storage data must be a numpy.ndarray")
        if data.ndim != 1:
            raise ValueError("storage data must be one-dimensional")
        if not data.flags.c_contiguous:
            raise ValueError("storage data must be contiguous")
        self._data = data

    @classmethod
    def allocate(cls, n_elements: int, dtype: DTypeLike = None) -> "Storage":
        """Allocate an uninitialised buffer of `n_elements` elements."""
        if n_elements < 0:
            raise ValueError(f"cannot allocate negative storage size {n_elements}")
        return cls(np.empty(n_elements, dtype=_resolve_dtype(dtype)))

    @classmethod
    def zeros(cls, n_elements: int, dtype: DTypeLike = None) -> "Storage":
        """Allocate a zero-filled buffer of `n_elements` elements."""
        if n_elements < 0:
            raise ValueError(f"cannot allocate negative storage size {n_elements}")
        return cls(np.zeros(n_elements, dtype=_resolve_dtype(dtype)))

    @classmethod
    def from_values(
        cls, values: Iterable[object] | NDArray, dtype: DTypeLike = None
    ) -> "Storage":
        """Copy flat values into a new buffer."""
        array = np.array(values, dtype=dtype, copy=True).reshape(-1)
        return cls(np.ascontiguousarray(array))

    @property
    def data(self) -> NDArray:
        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def itemsize(self) -> int:
        return self._data.itemsize

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, offset: int) -> object:
        return self._data[offset].item()

    def __setitem__(self, offset: int, value: object) -> None:
        self._data[offset] = value

    def clone(self) -> "Storage":
        """Return a deep copy of this buffer."""
        return Storage(self._data.copy())

    def __repr__(self) -> str:
        return f"Storage(size={len(self)}, dtype={self.dtype})"


def _resolve_dtype(dtype: DTypeLike) -> np.dtype:
    if dtype is None:
        return DEFAULT_DTYPE
    return np.dtype(dtype)


__all__ = ["DEFAULT_DTYPE", "Storage"]
