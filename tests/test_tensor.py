import numpy as np
import pytest

from viewgeom import (
    Geometry,
    InvalidArgumentError,
    Layout,
    RankError,
    SizeMismatchError,
    SparseTensor,
    Storage,
    Tensor,
    TensorHandle,
    sparse_coo_tensor,
    tensor,
)


def test_storage_wraps_flat_contiguous_buffer() -> None:
    storage = Storage.from_values([[1, 2], [3, 4]], dtype=np.int64)

    assert len(storage) == 4
    assert storage.dtype == np.int64
    assert storage[3] == 4

    storage[0] = 10
    assert storage.data.tolist() == [10, 2, 3, 4]


def test_storage_rejects_non_flat_buffers() -> None:
    with pytest.raises(ValueError):
        Storage(np.zeros((2, 2)))
    with pytest.raises(ValueError):
        Storage(np.zeros(8)[::2])
    with pytest.raises(TypeError):
        Storage([1, 2, 3])  # type: ignore[arg-type]


def test_storage_allocation_defaults_to_float64() -> None:
    assert Storage.zeros(3).dtype == np.float64
    assert Storage.allocate(0).data.shape == (0,)

    with pytest.raises(ValueError):
        Storage.allocate(-1)


def test_storage_clone_is_independent() -> None:
    storage = Storage.zeros(3)
    copied = storage.clone()

    copied[0] = 1.0

    assert storage[0] == 0.0


def test_tensor_defaults_to_contiguous_strides() -> None:
    handle = Tensor(Storage.zeros(24), (2, 3, 4))

    assert handle.strides == (12, 4, 1)
    assert handle.storage_offset == 0
    assert handle.layout is Layout.STRIDED
    assert handle.geometry == Geometry((2, 3, 4), (12, 4, 1), 0)
    assert handle.is_contiguous()
    assert not handle.is_view
    assert isinstance(handle, TensorHandle)


def test_tensor_rejects_invalid_geometry() -> None:
    storage = Storage.zeros(6)

    with pytest.raises(SizeMismatchError):
        Tensor(storage, (2, 3), (1,))
    with pytest.raises(InvalidArgumentError):
        Tensor(storage, (-1, 3))
    with pytest.raises(InvalidArgumentError):
        Tensor(storage, (2, 3), storage_offset=-1)
    with pytest.raises(TypeError):
        Tensor(storage, (2.0, 3))  # type: ignore[arg-type]


def test_tensor_geometry_must_fit_inside_storage() -> None:
    storage = Storage.zeros(6)

    with pytest.raises(InvalidArgumentError) as error:
        Tensor(storage, (2, 3), storage_offset=1)
    assert error.value.code == "storage_out_of_bounds"

    assert Tensor(storage, (2, 2), storage_offset=2).numpy().shape == (2, 2)
    assert Tensor(Storage.allocate(0), (0, 5)).numel() == 0


def test_set_storage_validates_against_new_storage() -> None:
    handle = Tensor(Storage.zeros(2), (2,))
    larger = Storage.zeros(6)

    handle.set_storage_(larger, Geometry((2, 3), (3, 1)))

    assert handle.storage is larger
    with pytest.raises(InvalidArgumentError):
        handle.set_geometry_(Geometry((7,), (1,)))
    assert handle.sizes == (2, 3)


def test_size_and_stride_wrap_negative_dims() -> None:
    handle = Tensor(Storage.zeros(6), (2, 3))

    assert handle.size(-1) == 3
    assert handle.stride(0) == 3

    with pytest.raises(RankError):
        tensor(1.0).size(0)


def test_numpy_aliases_storage_with_offset_and_strides() -> None:
    storage = Storage.from_values(np.arange(10))
    handle = Tensor(storage, (2, 2), (1, 3), 4)

    array = handle.numpy()
    np.testing.assert_array_equal(array, np.array([[4, 7], [5, 8]]))
    assert np.shares_memory(array, storage.data)

    array[1, 1] = -1
    assert storage[8] == -1


def test_numpy_of_zero_element_tensor_has_handle_shape() -> None:
    handle = Tensor(Storage.allocate(0), (2, 0, 3))

    assert handle.numpy().shape == (2, 0, 3)
    assert handle.tolist() == [[], []]


def test_is_contiguous_ignores_unit_axes() -> None:
    assert Tensor(Storage.zeros(3), (1, 3), (99, 1)).is_contiguous()
    assert not Tensor(Storage.zeros(6), (3, 2), (1, 3)).is_contiguous()


def test_item_requires_single_element() -> None:
    assert tensor(5).item() == 5
    assert tensor([[2.5]]).item() == 2.5

    with pytest.raises(SizeMismatchError) as error:
        tensor([1, 2]).item()
    assert error.value.code == "numel_mismatch"


def test_set_geometry_validates_before_mutating() -> None:
    handle = Tensor(Storage.zeros(6), (2, 3))

    with pytest.raises(SizeMismatchError):
        handle.set_geometry_(Geometry((6,), (1, 1)))

    assert handle.geometry == Geometry((2, 3), (3, 1), 0)
    assert handle.set_geometry_(Geometry((6,), (1,))) is handle
    assert handle.sizes == (6,)


def test_sparse_tensor_reports_dims_and_dense_form() -> None:
    sparse = sparse_coo_tensor([[0, 1, 1], [2, 0, 2]], [1.0, 2.0, 3.0], (2, 3))

    assert sparse.layout is Layout.SPARSE_COO
    assert sparse.sparse_dims() == 2
    assert sparse.dense_dims() == 0
    assert sparse.numel() == 6
    np.testing.assert_array_equal(
        sparse.to_dense().numpy(), np.array([[0.0, 0.0, 1.0], [2.0, 0.0, 3.0]])
    )


def test_sparse_tensor_sums_duplicate_coordinates() -> None:
    sparse = sparse_coo_tensor([[0, 0]], [1.0, 2.0], (2,))

    assert sparse.to_dense().tolist() == [3.0, 0.0]


def test_sparse_tensor_rejects_inconsistent_parts() -> None:
    with pytest.raises(SizeMismatchError):
        sparse_coo_tensor([[0, 1]], [1.0], (2,))
    with pytest.raises(SizeMismatchError):
        sparse_coo_tensor([[0, 1]], [1.0, 2.0], (2, 2))
    with pytest.raises(RankError):
        SparseTensor(tensor([0, 1]), tensor([1.0, 2.0]), (2,))


def test_sparse_raw_resize_keeps_dim_split_with_minus_one() -> None:
    sparse = sparse_coo_tensor([[0], [1]], [1.0], (2, 3))

    sparse.sparse_raw_resize_((3, 2), -1, -1)

    assert sparse.sizes == (3, 2)
    assert sparse.sparse_dims() == 2

    with pytest.raises(SizeMismatchError):
        sparse.sparse_raw_resize_((3, 2, 1), -1, -1)
