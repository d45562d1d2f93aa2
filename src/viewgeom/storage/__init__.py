from .buffer import DEFAULT_DTYPE, Storage
from .layout import Layout, LayoutPolicy, resolve_layout_policy

__all__ = [
    "DEFAULT_DTYPE",
    "Layout",
    "LayoutPolicy",
    "Storage",
    "resolve_layout_policy",
]
