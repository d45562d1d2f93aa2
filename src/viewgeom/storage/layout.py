from dataclasses import dataclass
from enum import Enum

from ..diagnostics import ErrorCode, UnsupportedLayoutError


class Layout(str, Enum):
    """Memory layout of one tensor handle."""

    STRIDED = "strided"
    SPARSE_COO = "sparse_coo"


@dataclass(frozen=True, slots=True)
class LayoutPolicy:
    """Capabilities of one layout as seen by geometry operations."""

    layout: Layout
    supports_strides: bool

    def require_strides(self, *, operation: str) -> None:
        """Fail when `operation` needs a stride-addressable layout."""
        if self.supports_strides:
            return
        raise UnsupportedLayoutError(
            code=ErrorCode.UNSUPPORTED_LAYOUT,
            message=(
                f"unsupported layout: {operation} is not implemented for "
                f"{self.layout.value} tensors"
            ),
            help="convert the tensor to a strided layout before calling this operation",
            related=(f"{operation} layout",),
            data={"operation": operation, "layout": self.layout.value},
        )


_POLICIES_BY_LAYOUT = {
    Layout.STRIDED: LayoutPolicy(layout=Layout.STRIDED, supports_strides=True),
    Layout.SPARSE_COO: LayoutPolicy(layout=Layout.SPARSE_COO, supports_strides=False),
}


def resolve_layout_policy(layout: Layout, /) -> LayoutPolicy:
    """Resolve canonical layout policy."""
    return _POLICIES_BY_LAYOUT[layout]


__all__ = ["Layout", "LayoutPolicy", "resolve_layout_policy"]
