from __future__ import annotations

from enum import IntEnum, IntFlag


class EIntrinsic(IntEnum):
    """Discriminator of the camera families known to the library."""

    PINHOLE_CAMERA_START = 0
    PINHOLE_CAMERA = 1
    PINHOLE_CAMERA_RADIAL1 = 2
    PINHOLE_CAMERA_RADIAL3 = 3
    PINHOLE_CAMERA_BROWN = 4
    PINHOLE_CAMERA_END = 5


def is_pinhole(t: EIntrinsic) -> bool:
    return EIntrinsic.PINHOLE_CAMERA_START < int(t) < EIntrinsic.PINHOLE_CAMERA_END


def is_valid_type(t: EIntrinsic) -> bool:
    return is_pinhole(t)


class IntrinsicParameterType(IntFlag):
    """
    Which intrinsic parameter groups an optimizer is allowed to move.

    Flags combine, e.g. ``ADJUST_FOCAL_LENGTH | ADJUST_PRINCIPAL_POINT``.
    """

    NONE = 1
    ADJUST_FOCAL_LENGTH = 2
    ADJUST_PRINCIPAL_POINT = 4
    ADJUST_DISTORTION = 8
    ADJUST_ALL = ADJUST_FOCAL_LENGTH | ADJUST_PRINCIPAL_POINT | ADJUST_DISTORTION
