import logging

from .config import DEFAULT_POLICY, GeometryPolicy, get_policy, set_policy, use_policy
from .diagnostics import (
    AmbiguousShapeError,
    DimensionOutOfRangeError,
    EmptyListError,
    ErrorCode,
    GeometryError,
    InvalidArgumentError,
    NotAViewError,
    RankError,
    RepeatedDimError,
    RepeatedDimensionError,
    SizeError,
    SizeMismatchError,
    UnsupportedLayoutError,
)
from .geometry import compute_stride, infer_size, wrap_dim
from .interop import arange, from_array, sparse_coo_tensor, tensor, to_numpy
from .ops import (
    as_strided,
    as_strided_,
    cat,
    cat_out,
    chunk,
    clone,
    contiguous,
    copy_,
    diagflat,
    diagonal,
    empty,
    expand,
    expand_as,
    flatten,
    meshgrid,
    narrow,
    numel,
    permute,
    repeat,
    reshape,
    reshape_as,
    select,
    slice,
    split,
    split_with_sizes,
    squeeze,
    squeeze_,
    stack,
    stack_out,
    t,
    t_,
    transpose,
    transpose_,
    unbind,
    unfold,
    unsqueeze,
    unsqueeze_,
    view,
    view_as,
    zeros,
)
from .storage import Layout, Storage
from .tensor import SparseTensor, Tensor
from .tensor_types import Geometry, TensorHandle, ViewMeta

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AmbiguousShapeError",
    "DEFAULT_POLICY",
    "DimensionOutOfRangeError",
    "EmptyListError",
    "ErrorCode",
    "Geometry",
    "GeometryError",
    "GeometryPolicy",
    "InvalidArgumentError",
    "Layout",
    "NotAViewError",
    "RankError",
    "RepeatedDimError",
    "RepeatedDimensionError",
    "SizeError",
    "SizeMismatchError",
    "SparseTensor",
    "Storage",
    "Tensor",
    "TensorHandle",
    "UnsupportedLayoutError",
    "ViewMeta",
    "arange",
    "as_strided",
    "as_strided_",
    "cat",
    "cat_out",
    "chunk",
    "clone",
    "compute_stride",
    "contiguous",
    "copy_",
    "diagflat",
    "diagonal",
    "empty",
    "expand",
    "expand_as",
    "flatten",
    "from_array",
    "get_policy",
    "infer_size",
    "meshgrid",
    "narrow",
    "numel",
    "permute",
    "repeat",
    "reshape",
    "reshape_as",
    "select",
    "set_policy",
    "slice",
    "sparse_coo_tensor",
    "split",
    "split_with_sizes",
    "squeeze",
    "squeeze_",
    "stack",
    "stack_out",
    "t",
    "t_",
    "tensor",
    "to_numpy",
    "transpose",
    "transpose_",
    "unbind",
    "unfold",
    "unsqueeze",
    "unsqueeze_",
    "use_policy",
    "view",
    "view_as",
    "wrap_dim",
    "zeros",
]
