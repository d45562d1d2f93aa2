from .decompose import chunk, narrow, select, slice, split, split_with_sizes, unbind
from .grid import meshgrid
from .materialize import (
    cat,
    cat_out,
    clone,
    contiguous,
    copy_,
    diagflat,
    empty,
    repeat,
    stack,
    stack_out,
    zeros,
)
from .rearrange import permute, t, t_, transpose, transpose_
from .reshape import flatten, reshape, reshape_as
from .views import (
    as_strided,
    as_strided_,
    diagonal,
    expand,
    expand_as,
    numel,
    squeeze,
    squeeze_,
    unfold,
    unsqueeze,
    unsqueeze_,
    view,
    view_as,
    view_from_geometry,
)

__all__ = [
    "as_strided",
    "as_strided_",
    "cat",
    "cat_out",
    "chunk",
    "clone",
    "contiguous",
    "copy_",
    "diagflat",
    "diagonal",
    "empty",
    "expand",
    "expand_as",
    "flatten",
    "meshgrid",
    "narrow",
    "numel",
    "permute",
    "repeat",
    "reshape",
    "reshape_as",
    "select",
    "slice",
    "split",
    "split_with_sizes",
    "squeeze",
    "squeeze_",
    "stack",
    "stack_out",
    "t",
    "t_",
    "transpose",
    "transpose_",
    "unbind",
    "unfold",
    "unsqueeze",
    "unsqueeze_",
    "view",
    "view_as",
    "view_from_geometry",
    "zeros",
]
