from .dims import is_legacy_empty, legacy_cat_wrap_dim, wrap_dim
from .infer import (
    contiguous_strides,
    diagonal_geometry,
    expand_geometry,
    permute_geometry,
    select_geometry,
    slice_geometry,
    squeeze_dim_geometry,
    squeeze_geometry,
    transpose_geometry,
    unfold_geometry,
    unsqueeze_geometry,
)
from .reshape import compute_stride, infer_size

__all__ = [
    "compute_stride",
    "contiguous_strides",
    "diagonal_geometry",
    "expand_geometry",
    "infer_size",
    "is_legacy_empty",
    "legacy_cat_wrap_dim",
    "permute_geometry",
    "select_geometry",
    "slice_geometry",
    "squeeze_dim_geometry",
    "squeeze_geometry",
    "transpose_geometry",
    "unfold_geometry",
    "unsqueeze_geometry",
    "wrap_dim",
]
