import pytest

from viewgeom import (
    DEFAULT_POLICY,
    GeometryPolicy,
    NotAViewError,
    arange,
    get_policy,
    reshape,
    set_policy,
    transpose,
    use_policy,
)
from viewgeom.config import _ACTIVE_POLICY


def test_default_policy_keeps_legacy_empty_shapes_and_copy_fallback() -> None:
    assert get_policy() is DEFAULT_POLICY
    assert DEFAULT_POLICY.legacy_empty_shapes is True
    assert DEFAULT_POLICY.copy_fallback is True


def test_use_policy_overrides_fields_and_restores_previous_policy() -> None:
    with use_policy(legacy_empty_shapes=False) as policy:
        assert policy.legacy_empty_shapes is False
        assert policy.copy_fallback is True
        assert get_policy() is policy

        with use_policy(copy_fallback=False) as nested:
            assert nested == GeometryPolicy(
                legacy_empty_shapes=False, copy_fallback=False
            )

        assert get_policy() is policy

    assert get_policy() is DEFAULT_POLICY


def test_use_policy_accepts_explicit_policy() -> None:
    explicit = GeometryPolicy(legacy_empty_shapes=False, copy_fallback=False)

    with use_policy(explicit) as policy:
        assert policy is explicit


def test_use_policy_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError, match="strict"):
        with use_policy(strict=True):
            pass


def test_set_policy_returns_reset_token() -> None:
    token = set_policy(GeometryPolicy(copy_fallback=False))
    try:
        assert get_policy().copy_fallback is False
    finally:
        _ACTIVE_POLICY.reset(token)

    assert get_policy() is DEFAULT_POLICY


def test_set_policy_rejects_non_policy_values() -> None:
    with pytest.raises(TypeError):
        set_policy({"copy_fallback": False})  # type: ignore[arg-type]


def test_disabled_copy_fallback_turns_reshape_into_view() -> None:
    transposed = transpose(reshape(arange(6), (2, 3)), 0, 1)

    with use_policy(copy_fallback=False):
        with pytest.raises(NotAViewError) as error:
            reshape(transposed, (6,))

    assert error.value.code == "not_a_view"
