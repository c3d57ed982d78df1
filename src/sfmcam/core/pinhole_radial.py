"""
Pinhole cameras with Brown-Conrady lens distortion.

All families share the pinhole parameter prefix [f, cx, cy] and append their
distortion coefficients; distortion acts on normalized camera-plane coordinates.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

import numpy as np

from sfmcam.core.camera_types import EIntrinsic
from sfmcam.core.distortion import BrownDistortion
from sfmcam.core.intrinsic import as_points2, read_floats
from sfmcam.core.pinhole import PinholeIntrinsic
from sfmcam.core.registry import register_intrinsic


class _DistortedPinhole(PinholeIntrinsic):
    disto_key: ClassVar[str] = ""

    _distortion: BrownDistortion

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, disto={self.distortion_params()})"

    def distortion(self) -> BrownDistortion:
        return self._distortion

    @abstractmethod
    def distortion_params(self) -> list[float]: ...

    def have_distortion(self) -> bool:
        return True

    def add_distortion(self, p: np.ndarray) -> np.ndarray:
        pts, shape = as_points2(p)
        xd, yd = self._distortion.distort(pts[:, 0], pts[:, 1])
        return np.stack([xd, yd], axis=-1).reshape(shape)

    def remove_distortion(self, p: np.ndarray) -> np.ndarray:
        pts, shape = as_points2(p)
        x, y = self._distortion.undistort(pts[:, 0], pts[:, 1])
        return np.stack([x, y], axis=-1).reshape(shape)

    def bearing_vector(self, p: np.ndarray) -> np.ndarray:
        pts, shape = as_points2(p)
        x = self.remove_distortion(self.image_to_camera(pts))
        d = np.concatenate([x, np.ones((x.shape[0], 1), dtype=np.float64)], axis=1)
        d = d / np.linalg.norm(d, axis=-1, keepdims=True)
        return d.reshape(shape[:-1] + (3,))

    def get_distorted_pixel(self, p: np.ndarray) -> np.ndarray:
        return self.camera_to_image(self.add_distortion(self.image_to_camera(p)))

    def get_undistorted_pixel(self, p: np.ndarray) -> np.ndarray:
        return self.camera_to_image(self.remove_distortion(self.image_to_camera(p)))

    def get_params(self) -> list[float]:
        return super().get_params() + self.distortion_params()

    def save(self, ar: dict[str, Any]) -> None:
        super().save(ar)
        ar[self.disto_key] = self.distortion_params()

    @classmethod
    def load(cls, ar: Mapping[str, Any]) -> "PinholeIntrinsic":
        disto = read_floats(ar, cls.disto_key, cls.param_count - PinholeIntrinsic.param_count)
        return cls(*cls.load_pinhole(ar), *disto)


@register_intrinsic("pinhole_radial_k1")
class PinholeRadialK1(_DistortedPinhole):
    """Pinhole with one radial distortion coefficient: params [f, cx, cy, k1]."""

    param_count = 4
    disto_key = "disto_k1"

    def __init__(
        self, w: int = 0, h: int = 0, focal_length_pix: float = 0.0, ppx: float = 0.0, ppy: float = 0.0, k1: float = 0.0
    ) -> None:
        super().__init__(w, h, focal_length_pix, ppx, ppy)
        self._distortion = BrownDistortion(k1=float(k1))

    def get_type(self) -> EIntrinsic:
        return EIntrinsic.PINHOLE_CAMERA_RADIAL1

    def distortion_params(self) -> list[float]:
        return [self._distortion.k1]


@register_intrinsic("pinhole_radial_k3")
class PinholeRadialK3(_DistortedPinhole):
    """Pinhole with three radial distortion coefficients: params [f, cx, cy, k1, k2, k3]."""

    param_count = 6
    disto_key = "disto_k3"

    def __init__(
        self,
        w: int = 0,
        h: int = 0,
        focal_length_pix: float = 0.0,
        ppx: float = 0.0,
        ppy: float = 0.0,
        k1: float = 0.0,
        k2: float = 0.0,
        k3: float = 0.0,
    ) -> None:
        super().__init__(w, h, focal_length_pix, ppx, ppy)
        self._distortion = BrownDistortion(k1=float(k1), k2=float(k2), k3=float(k3))

    def get_type(self) -> EIntrinsic:
        return EIntrinsic.PINHOLE_CAMERA_RADIAL3

    def distortion_params(self) -> list[float]:
        d = self._distortion
        return [d.k1, d.k2, d.k3]


@register_intrinsic("pinhole_brown_t2")
class PinholeBrownT2(_DistortedPinhole):
    """
    Pinhole with Brown-Conrady distortion (3 radial + 2 tangential terms).

    Params: [f, cx, cy, k1, k2, k3, t1, t2].
    """

    param_count = 8
    disto_key = "disto_t2"

    def __init__(
        self,
        w: int = 0,
        h: int = 0,
        focal_length_pix: float = 0.0,
        ppx: float = 0.0,
        ppy: float = 0.0,
        k1: float = 0.0,
        k2: float = 0.0,
        k3: float = 0.0,
        t1: float = 0.0,
        t2: float = 0.0,
    ) -> None:
        super().__init__(w, h, focal_length_pix, ppx, ppy)
        self._distortion = BrownDistortion(k1=float(k1), k2=float(k2), k3=float(k3), t1=float(t1), t2=float(t2))

    def get_type(self) -> EIntrinsic:
        return EIntrinsic.PINHOLE_CAMERA_BROWN

    def distortion_params(self) -> list[float]:
        d = self._distortion
        return [d.k1, d.k2, d.k3, d.t1, d.t2]
