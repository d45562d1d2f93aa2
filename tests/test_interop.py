from types import SimpleNamespace

import numpy as np
import pytest

from viewgeom import arange, from_array, reshape, tensor, to_numpy, transpose
from viewgeom.interop import derive_namespace_id, infer_backend_family


def test_from_array_copies_numpy_input() -> None:
    source = np.arange(6).reshape(2, 3)

    handle = from_array(source)

    assert handle.sizes == (2, 3)
    assert handle.strides == (3, 1)
    assert handle.tolist() == [[0, 1, 2], [3, 4, 5]]
    assert not np.shares_memory(handle.numpy(), source)


def test_from_array_packs_non_contiguous_input() -> None:
    source = np.arange(6).reshape(2, 3).T

    handle = from_array(source)

    assert handle.is_contiguous()
    np.testing.assert_array_equal(handle.numpy(), source)


def test_from_array_rejects_non_array_values() -> None:
    with pytest.raises(TypeError):
        from_array(object())


def test_to_numpy_returns_detached_copy() -> None:
    handle = transpose(reshape(arange(6), (2, 3)), 0, 1)

    array = to_numpy(handle)

    np.testing.assert_array_equal(array, np.arange(6).reshape(2, 3).T)
    array[0, 0] = 42
    assert handle.tolist()[0][0] == 0


def test_tensor_and_arange_build_contiguous_handles() -> None:
    assert tensor([[1.5, 2.5]]).sizes == (1, 2)
    assert tensor([1, 2], dtype=np.int32).dtype == np.int32
    assert arange(4).tolist() == [0, 1, 2, 3]
    assert tensor(3.0).sizes == ()


def test_derive_namespace_id_uses_module_for_class_namespaces() -> None:
    module_like = SimpleNamespace(__name__="array_api_compat.numpy")
    class_like = SimpleNamespace(__name__="Namespace", __module__="mylib.arrays")

    assert derive_namespace_id(module_like) == "array_api_compat.numpy"
    assert derive_namespace_id(class_like) == "mylib.arrays.Namespace"


def test_derive_namespace_id_rejects_missing_names() -> None:
    with pytest.raises(TypeError):
        derive_namespace_id(SimpleNamespace(__name__=" "))
    with pytest.raises(TypeError):
        derive_namespace_id(SimpleNamespace())


@pytest.mark.parametrize(
    ("namespace_id", "family"),
    [
        ("array_api_compat.numpy", "numpy"),
        ("numpy", "numpy"),
        ("array_api_compat.torch", "torch"),
        ("jax.numpy", "jax"),
        ("mylib.arrays", None),
    ],
)
def test_infer_backend_family(namespace_id: str, family: str | None) -> None:
    assert infer_backend_family(namespace_id) == family
