"""
Process-wide table mapping persisted type tags to intrinsic classes.

Tags are part of the on-disk format: once a family is released under a tag, the tag
must not change or older archives stop loading.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from sfmcam.core.intrinsic import IntrinsicBase

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="type[IntrinsicBase]")

_REGISTRY: dict[str, type["IntrinsicBase"]] = {}


class IntrinsicArchiveError(ValueError):
    pass


class UnknownIntrinsicTypeError(IntrinsicArchiveError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"unknown intrinsic type tag: {tag!r} (registered: {sorted(_REGISTRY)})")
        self.tag = tag


def register_intrinsic(tag: str) -> Callable[[T], T]:
    """
    Class decorator registering an intrinsic family under a persisted `tag`.

    Registering the same class twice is a no-op; a second class under an existing
    tag is rejected.
    """

    def deco(cls: T) -> T:
        prev = _REGISTRY.get(tag)
        if prev is not None and prev is not cls:
            raise ValueError(f"intrinsic tag {tag!r} already registered for {prev.__name__}")
        _REGISTRY[tag] = cls
        cls.type_tag = tag
        logger.debug("registered intrinsic %s as %r", cls.__name__, tag)
        return cls

    return deco


def intrinsic_class(tag: str) -> type["IntrinsicBase"]:
    try:
        return _REGISTRY[tag]
    except KeyError:
        raise UnknownIntrinsicTypeError(tag) from None


def registered_tags() -> list[str]:
    return sorted(_REGISTRY)
