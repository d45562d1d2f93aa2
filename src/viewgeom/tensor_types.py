from dataclasses import dataclass
from math import prod
from typing import Protocol, TypeAlias, runtime_checkable

from .storage.layout import Layout

Shape: TypeAlias = tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Geometry:
    """Sizes, strides and storage offset describing one strided view."""

    sizes: Shape
    strides: Shape
    storage_offset: int = 0

    @property
    def dim(self) -> int:
        return len(self.sizes)

    def numel(self) -> int:
        return prod(self.sizes, start=1)


@dataclass(frozen=True, slots=True)
class ViewMeta:
    """Bookkeeping exposed to differentiation/tracing collaborators."""

    op: str
    implicit: bool = False


@runtime_checkable
class TensorHandle(Protocol):
    """Tensor handle contract consumed by every geometry operation."""

    @property
    def sizes(self) -> Shape:
        """Tensor sizes."""
        ...

    @property
    def layout(self) -> Layout:
        """Storage layout."""
        ...

    def dim(self) -> int: ...

    def numel(self) -> int: ...


__all__ = [
    "Geometry",
    "Shape",
    "TensorHandle",
    "ViewMeta",
]
