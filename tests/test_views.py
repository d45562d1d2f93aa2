import numpy as np
import pytest

from viewgeom import (
    InvalidArgumentError,
    NotAViewError,
    RankError,
    RepeatedDimensionError,
    SizeMismatchError,
    UnsupportedLayoutError,
    arange,
    as_strided,
    as_strided_,
    diagonal,
    expand,
    expand_as,
    narrow,
    numel,
    reshape,
    sparse_coo_tensor,
    squeeze,
    squeeze_,
    tensor,
    transpose,
    unfold,
    unsqueeze,
    unsqueeze_,
    use_policy,
    view,
    view_as,
    zeros,
)


def test_as_strided_aliases_base_storage() -> None:
    base = arange(6)

    window = as_strided(base, (2, 2), (1, 2), 1)

    assert window.tolist() == [[1, 3], [2, 4]]
    assert window.is_view
    assert window.base is base
    assert window.storage is base.storage
    assert np.shares_memory(window.numpy(), base.numpy())

    window.numpy()[1, 1] = 100
    assert base.tolist()[4] == 100


def test_as_strided_defaults_to_input_storage_offset() -> None:
    base = arange(10)
    tail = narrow(base, 0, 4, 6)

    window = as_strided(tail, (3,), (2,))

    assert window.storage_offset == 4
    assert window.tolist() == [4, 6, 8]
    assert window.base is base


def test_as_strided_rejects_invalid_geometry() -> None:
    base = arange(6)

    with pytest.raises(SizeMismatchError):
        as_strided(base, (2, 3), (1,))
    with pytest.raises(InvalidArgumentError):
        as_strided(base, (-1,), (1,))
    with pytest.raises(InvalidArgumentError):
        as_strided(base, (1,), (1,), -1)


def test_as_strided_rejects_geometry_past_storage_end() -> None:
    base = arange(6)

    with pytest.raises(InvalidArgumentError) as error:
        as_strided(base, (64,), (1,), 4)

    assert error.value.code == "storage_out_of_bounds"
    assert error.value.data == {
        "operation": "as_strided",
        "lowest": 4,
        "highest": 67,
        "storage_size": 6,
    }
    with pytest.raises(InvalidArgumentError):
        as_strided(base, (2, 2), (3, 1), 2)


def test_as_strided_bounds_cover_negative_strides() -> None:
    base = arange(6)

    assert as_strided(base, (2,), (-1,), 1).tolist() == [1, 0]
    assert as_strided(base, (3,), (2,), 1).tolist() == [1, 3, 5]

    with pytest.raises(InvalidArgumentError) as error:
        as_strided(base, (3,), (-1,), 1)
    assert error.value.data["lowest"] == -1


def test_as_strided_allows_any_offset_for_zero_elements() -> None:
    assert as_strided(arange(6), (0, 4), (4, 1), 100).numel() == 0


def test_as_strided_in_place_leaves_handle_unchanged_on_failure() -> None:
    handle = arange(6)

    with pytest.raises(SizeMismatchError):
        as_strided_(handle, (2, 3), (1,))
    assert handle.sizes == (6,)
    with pytest.raises(InvalidArgumentError):
        as_strided_(handle, (3, 3), (3, 1))
    assert handle.geometry.strides == (1,)

    result = as_strided_(handle, (3, 2), (2, 1))
    assert result is handle
    assert handle.tolist() == [[0, 1], [2, 3], [4, 5]]


def test_squeeze_drops_unit_axes() -> None:
    handle = zeros((1, 3, 1))

    assert squeeze(handle).sizes == (3,)
    assert squeeze(handle, 0).sizes == (3, 1)
    assert squeeze(handle, -1).sizes == (1, 3)
    assert squeeze(handle, 1).sizes == (1, 3, 1)
    assert squeeze(handle).view_meta.op == "squeeze"


def test_squeeze_of_scalar_accepts_dim_zero() -> None:
    scalar = tensor(3.0)

    assert squeeze(scalar, 0).sizes == ()
    assert squeeze(scalar, -1).sizes == ()


def test_squeeze_in_place_mutates_handle() -> None:
    handle = zeros((1, 3, 1))

    assert squeeze_(handle, 0) is handle
    assert handle.sizes == (3, 1)
    assert handle.strides == (1, 1)


@pytest.mark.parametrize("dim", [-3, -2, -1, 0, 1, 2])
def test_squeeze_undoes_unsqueeze(dim: int) -> None:
    handle = transpose(reshape(arange(6), (2, 3)), 0, 1)

    roundtrip = squeeze(unsqueeze(handle, dim), dim)

    assert roundtrip.geometry == handle.geometry


def test_unsqueeze_rejects_out_of_range_dim() -> None:
    with pytest.raises(IndexError):
        unsqueeze(arange(6), 2)


def test_unsqueeze_of_empty_tensor_depends_on_policy() -> None:
    handle = zeros((0, 3))

    with pytest.raises(RankError):
        unsqueeze_(handle, 1)
    assert handle.sizes == (0, 3)

    with use_policy(legacy_empty_shapes=False):
        assert unsqueeze(handle, 1).sizes == (0, 1, 3)


def test_expand_broadcasts_without_copying() -> None:
    column = tensor([[1], [2], [3]])

    expanded = expand(column, (2, 3, 4))

    assert expanded.sizes == (2, 3, 4)
    assert expanded.strides == (0, 1, 0)
    assert expanded.view_meta.op == "expand"
    assert not expanded.view_meta.implicit
    np.testing.assert_array_equal(
        expanded.numpy(), np.broadcast_to(column.numpy(), (2, 3, 4))
    )
    assert np.shares_memory(expanded.numpy(), column.numpy())


def test_expand_of_scalar_rejects_wildcard() -> None:
    with pytest.raises(InvalidArgumentError) as error:
        expand(tensor(1.0), (-1,))

    assert "leading, non-existing dimension" in str(error.value)
    assert expand(tensor(1.0), (2, 3)).strides == (0, 0)


def test_expand_marks_implicit_broadcasts() -> None:
    expanded = expand(tensor([1, 2, 3]), (2, 3), implicit=True)

    assert expanded.view_meta.implicit


def test_expand_as_uses_other_sizes() -> None:
    row = tensor([1, 2, 3])

    assert expand_as(row, zeros((4, 3))).tolist() == [[1, 2, 3]] * 4

    with pytest.raises(SizeMismatchError):
        expand_as(row, zeros((4, 2)))


def test_diagonal_is_a_writable_view() -> None:
    matrix = reshape(arange(16), (4, 4))

    upper = diagonal(matrix, 1)

    assert upper.tolist() == [1, 6, 11]
    assert upper.storage_offset == 1
    assert upper.strides == (5,)

    upper.numpy()[0] = -1
    assert matrix.tolist()[0][1] == -1


def test_diagonal_wraps_negative_dims() -> None:
    batch = reshape(arange(18), (2, 3, 3))

    assert diagonal(batch, 0, -2, -1).tolist() == [[0, 4, 8], [9, 13, 17]]

    with pytest.raises(RepeatedDimensionError):
        diagonal(batch, 0, 1, -2)


def test_view_requires_compatible_strides() -> None:
    matrix = reshape(arange(6), (2, 3))

    flat = view(matrix, (-1,))
    assert flat.tolist() == [0, 1, 2, 3, 4, 5]
    assert flat.view_meta.op == "view"

    with pytest.raises(NotAViewError) as error:
        view(transpose(matrix, 0, 1), (6,))
    assert "view size is not compatible" in str(error.value)


def test_view_as_matches_other_shape() -> None:
    flat = arange(6)

    assert view_as(flat, zeros((3, 2))).sizes == (3, 2)


def test_unfold_windows_along_dim() -> None:
    windows = unfold(arange(6), 0, 2, 2)

    assert windows.tolist() == [[0, 1], [2, 3], [4, 5]]
    assert unfold(arange(5), 0, 3, 1).tolist() == [[0, 1, 2], [1, 2, 3], [2, 3, 4]]


def test_numel_counts_elements() -> None:
    assert numel(tensor(5)) == 1
    assert numel(zeros((2, 0, 3))) == 0
    assert numel(zeros((2, 3, 4))) == 24


def test_view_operations_reject_sparse_tensors() -> None:
    sparse = sparse_coo_tensor([[0, 1]], [1.0, 2.0], (2,))

    with pytest.raises(UnsupportedLayoutError) as error:
        squeeze(sparse)  # type: ignore[arg-type]

    assert error.value.data == {"operation": "squeeze", "layout": "sparse_coo"}
