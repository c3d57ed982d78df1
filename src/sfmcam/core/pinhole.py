from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from sfmcam.core.camera_types import EIntrinsic, IntrinsicParameterType
from sfmcam.core.geometry import Pose3, frozen_array, p_from_krt
from sfmcam.core.intrinsic import IntrinsicBase, as_points2, read_float, read_floats
from sfmcam.core.registry import register_intrinsic

logger = logging.getLogger(__name__)


@register_intrinsic("pinhole")
class PinholeIntrinsic(IntrinsicBase):
    """
    Ideal pinhole camera: no skew, no distortion, a single focal length.

      K = [[f, 0, cx],
           [0, f, cy],
           [0, 0,  1]]

    f and (cx, cy) are in pixels. K and its inverse are built together in the
    constructor and exposed read-only.

    Precondition: f != 0 for every geometric query. The default-constructed camera
    (f = 0) has a non-finite Kinv and yields inf/nan results; nothing here checks
    for it, callers must only use fully initialized cameras.
    """

    param_count = 3

    def __init__(self, w: int = 0, h: int = 0, focal_length_pix: float = 0.0, ppx: float = 0.0, ppy: float = 0.0) -> None:
        super().__init__(w, h)
        f = float(focal_length_pix)
        ppx = float(ppx)
        ppy = float(ppy)
        self._K = frozen_array([[f, 0.0, ppx], [0.0, f, ppy], [0.0, 0.0, 1.0]])
        with np.errstate(divide="ignore", invalid="ignore"):
            inv_f = np.float64(1.0) / np.float64(f)
            self._Kinv = frozen_array([[inv_f, 0.0, -ppx * inv_f], [0.0, inv_f, -ppy * inv_f], [0.0, 0.0, 1.0]])

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(w={self._w}, h={self._h}, f={self.focal()!r}, "
            f"pp=({self._K[0, 2]!r}, {self._K[1, 2]!r}))"
        )

    def get_type(self) -> EIntrinsic:
        return EIntrinsic.PINHOLE_CAMERA

    def K(self) -> np.ndarray:
        return self._K

    def Kinv(self) -> np.ndarray:
        return self._Kinv

    def focal(self) -> float:
        return float(self._K[0, 0])

    def principal_point(self) -> np.ndarray:
        return np.array([self._K[0, 2], self._K[1, 2]], dtype=np.float64)

    def bearing_vector(self, p: np.ndarray) -> np.ndarray:
        pts, shape = as_points2(p)
        ph = np.concatenate([pts, np.ones((pts.shape[0], 1), dtype=np.float64)], axis=1)
        d = ph @ self._Kinv.T
        d = d / np.linalg.norm(d, axis=-1, keepdims=True)
        return d.reshape(shape[:-1] + (3,))

    def camera_to_image(self, p: np.ndarray) -> np.ndarray:
        return self.focal() * np.asarray(p, dtype=np.float64) + self.principal_point()

    def image_to_camera(self, p: np.ndarray) -> np.ndarray:
        return (np.asarray(p, dtype=np.float64) - self.principal_point()) / self.focal()

    def have_distortion(self) -> bool:
        return False

    def add_distortion(self, p: np.ndarray) -> np.ndarray:
        return np.asarray(p, dtype=np.float64)

    def remove_distortion(self, p: np.ndarray) -> np.ndarray:
        return np.asarray(p, dtype=np.float64)

    def get_distorted_pixel(self, p: np.ndarray) -> np.ndarray:
        return np.asarray(p, dtype=np.float64)

    def get_undistorted_pixel(self, p: np.ndarray) -> np.ndarray:
        return np.asarray(p, dtype=np.float64)

    def image_plane_error_to_camera_plane(self, value: float) -> float:
        return float(value / self._K[0, 0])

    def projective_matrix(self, pose: Pose3) -> np.ndarray:
        return p_from_krt(self._K, pose.rotation(), pose.translation())

    def get_params(self) -> list[float]:
        return [float(self._K[0, 0]), float(self._K[0, 2]), float(self._K[1, 2])]

    def update_from_params(self, params: Sequence[float]) -> bool:
        try:
            values = [float(v) for v in np.asarray(params, dtype=np.float64).reshape(-1)]
        except (TypeError, ValueError):
            logger.debug("%s got non-numeric params %r", type(self).__name__, params)
            return False
        if len(values) != self.param_count:
            logger.debug("%s expects %d params, got %d", type(self).__name__, self.param_count, len(values))
            return False
        # Rebuild through the constructor: K, Kinv and any distortion state stay in sync.
        self.__init__(self._w, self._h, *values)
        return True

    def subset_parameterization(self, adjust: IntrinsicParameterType) -> list[int]:
        """
        Parameter layout: 0 = focal, 1-2 = principal point, 3.. = distortion.
        """
        if adjust & IntrinsicParameterType.NONE:
            return list(range(self.param_count))
        constant: list[int] = []
        if not adjust & IntrinsicParameterType.ADJUST_FOCAL_LENGTH:
            constant.append(0)
        if not adjust & IntrinsicParameterType.ADJUST_PRINCIPAL_POINT:
            constant.extend([1, 2])
        if not adjust & IntrinsicParameterType.ADJUST_DISTORTION:
            constant.extend(range(3, self.param_count))
        return constant

    def is_valid(self) -> bool:
        return super().is_valid() and self.focal() != 0.0

    def save(self, ar: dict[str, Any]) -> None:
        super().save(ar)
        ar["focal_length"] = float(self._K[0, 0])
        ar["principal_point"] = [float(self._K[0, 2]), float(self._K[1, 2])]

    @classmethod
    def load_pinhole(cls, ar: Mapping[str, Any]) -> tuple[int, int, float, float, float]:
        w, h = cls.load_base(ar)
        f = read_float(ar, "focal_length")
        ppx, ppy = read_floats(ar, "principal_point", 2)
        return w, h, f, ppx, ppy

    @classmethod
    def load(cls, ar: Mapping[str, Any]) -> "PinholeIntrinsic":
        return cls(*cls.load_pinhole(ar))
