import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, fields, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeometryPolicy:
    """Behaviour switches shared by every geometry operation.

    `legacy_empty_shapes` keeps the zero-size compatibility rules: zero-element
    reshape results collapse to `(0,)`, zero-length slices return a fresh
    `(0,)` tensor, `narrow` rejects zero lengths on non-empty axes,
    `unsqueeze` rejects empty tensors and `diagonal` rejects empty diagonals.

    `copy_fallback` lets `reshape` materialize a contiguous copy when no
    stride layout exists; when disabled, `reshape` behaves like `view`.
    """

    legacy_empty_shapes: bool = True
    copy_fallback: bool = True


DEFAULT_POLICY = GeometryPolicy()

_ACTIVE_POLICY: ContextVar[GeometryPolicy] = ContextVar(
    "viewgeom_geometry_policy", default=DEFAULT_POLICY
)


def get_policy() -> GeometryPolicy:
    """Return the geometry policy active in the current context."""
    return _ACTIVE_POLICY.get()


def set_policy(policy: GeometryPolicy, /) -> Token[GeometryPolicy]:
    """Install one policy for the current context and return its reset token."""
    if not isinstance(policy, GeometryPolicy):
        raise TypeError("policy must be a GeometryPolicy")
    logger.debug("geometry policy set to %r", policy)
    return _ACTIVE_POLICY.set(policy)


@contextmanager
def use_policy(
    policy: GeometryPolicy | None = None, /, **overrides: bool
) -> Iterator[GeometryPolicy]:
    """Temporarily activate one policy, optionally overriding single fields."""
    known = {field.name for field in fields(GeometryPolicy)}
    unknown = sorted(name for name in overrides if name not in known)
    if unknown:
        raise TypeError(f"unknown geometry policy fields: {', '.join(unknown)}")

    base_policy = get_policy() if policy is None else policy
    effective = replace(base_policy, **overrides) if overrides else base_policy
    token = set_policy(effective)
    try:
        yield effective
    finally:
        _ACTIVE_POLICY.reset(token)


__all__ = [
    "DEFAULT_POLICY",
    "GeometryPolicy",
    "get_policy",
    "set_policy",
    "use_policy",
]
