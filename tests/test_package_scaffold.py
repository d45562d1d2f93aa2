import logging

import pytest

import viewgeom
from viewgeom import arange, reshape, transpose, use_policy


def test_public_surface_is_importable() -> None:
    missing = [name for name in viewgeom.__all__ if not hasattr(viewgeom, name)]

    assert missing == []


@pytest.mark.parametrize(
    "name",
    [
        "as_strided",
        "cat",
        "chunk",
        "diagonal",
        "expand",
        "flatten",
        "meshgrid",
        "narrow",
        "permute",
        "repeat",
        "reshape",
        "select",
        "slice",
        "split",
        "split_with_sizes",
        "squeeze",
        "stack",
        "t",
        "transpose",
        "unbind",
        "unsqueeze",
        "view",
    ],
)
def test_operations_are_exported(name: str) -> None:
    assert name in viewgeom.__all__
    assert callable(getattr(viewgeom, name))


def test_package_logger_has_null_handler() -> None:
    handlers = logging.getLogger("viewgeom").handlers

    assert any(isinstance(handler, logging.NullHandler) for handler in handlers)


def test_reshape_copy_fallback_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    transposed = transpose(reshape(arange(6), (2, 3)), 0, 1)

    with caplog.at_level(logging.DEBUG, logger="viewgeom"):
        reshape(transposed, (6,))

    assert any("needs a copy" in record.getMessage() for record in caplog.records)


def test_policy_changes_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="viewgeom"):
        with use_policy(copy_fallback=False):
            pass

    assert any(record.name == "viewgeom.config" for record in caplog.records)
