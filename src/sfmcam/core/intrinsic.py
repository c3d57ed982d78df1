from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

import numpy as np

from sfmcam.core.camera_types import EIntrinsic, IntrinsicParameterType, is_valid_type
from sfmcam.core.geometry import Pose3
from sfmcam.core.registry import IntrinsicArchiveError


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise IntrinsicArchiveError(msg)


def read_float(ar: Mapping[str, Any], key: str) -> float:
    _require(key in ar, f"{key} is required")
    try:
        return float(ar[key])
    except (TypeError, ValueError) as e:
        raise IntrinsicArchiveError(f"{key} must be a number") from e


def read_floats(ar: Mapping[str, Any], key: str, n: int) -> list[float]:
    _require(key in ar, f"{key} is required")
    raw = ar[key]
    _require(isinstance(raw, (list, tuple)) and len(raw) == n, f"{key} must be a list of {n} numbers")
    try:
        return [float(v) for v in raw]
    except (TypeError, ValueError) as e:
        raise IntrinsicArchiveError(f"{key} must be a list of {n} numbers") from e


def read_int(ar: Mapping[str, Any], key: str) -> int:
    _require(key in ar, f"{key} is required")
    v = ar[key]
    # bool is an int subclass; 1920.0 is accepted, 1920.9 is not.
    ok = (isinstance(v, int) and not isinstance(v, bool)) or (isinstance(v, float) and v.is_integer())
    _require(ok, f"{key} must be an integer")
    return int(v)


def as_points2(p: Any) -> tuple[np.ndarray, tuple[int, ...]]:
    """Return (N,2) float64 points and the caller's original shape."""
    a = np.asarray(p, dtype=np.float64)
    if a.shape[-1:] != (2,):
        raise ValueError(f"expected a point of shape (2,) or (N,2), got {a.shape}")
    return a.reshape(-1, 2), a.shape


class IntrinsicBase(ABC):
    """
    Camera intrinsic contract shared by every camera family.

    An intrinsic maps between pixel coordinates on a width x height image plane and
    the camera frame (normalized camera plane, bearing vectors). Concrete families
    supply the calibration and distortion model; client code only talks to this
    interface.

    Point arguments accept a single point of shape (2,) or a batch (N,2); results keep
    the leading shape.

    Instances are never patched field by field: `update_from_params` rebuilds the
    whole object through its constructor so derived state stays consistent.
    """

    type_tag: ClassVar[str] = ""
    param_count: ClassVar[int] = 0

    def __init__(self, w: int = 0, h: int = 0) -> None:
        self._w = int(w)
        self._h = int(h)

    @property
    def width(self) -> int:
        return self._w

    @property
    def height(self) -> int:
        return self._h

    @abstractmethod
    def get_type(self) -> EIntrinsic: ...

    @abstractmethod
    def have_distortion(self) -> bool: ...

    @abstractmethod
    def bearing_vector(self, p: np.ndarray) -> np.ndarray:
        """Pixel(s) -> unit direction(s) in the camera frame, distortion removed."""

    def __call__(self, p: np.ndarray) -> np.ndarray:
        return self.bearing_vector(p)

    @abstractmethod
    def camera_to_image(self, p: np.ndarray) -> np.ndarray: ...

    @abstractmethod
    def image_to_camera(self, p: np.ndarray) -> np.ndarray: ...

    @abstractmethod
    def add_distortion(self, p: np.ndarray) -> np.ndarray:
        """Apply distortion to normalized camera-plane point(s)."""

    @abstractmethod
    def remove_distortion(self, p: np.ndarray) -> np.ndarray:
        """Remove distortion from normalized camera-plane point(s)."""

    @abstractmethod
    def get_distorted_pixel(self, p: np.ndarray) -> np.ndarray: ...

    @abstractmethod
    def get_undistorted_pixel(self, p: np.ndarray) -> np.ndarray: ...

    @abstractmethod
    def image_plane_error_to_camera_plane(self, value: float) -> float: ...

    @abstractmethod
    def projective_matrix(self, pose: Pose3) -> np.ndarray:
        """3x4 projection matrix K [R|t] for the given pose (distortion ignored)."""

    @abstractmethod
    def get_params(self) -> list[float]:
        """Ordered parameter vector handed to the optimizer."""

    @abstractmethod
    def update_from_params(self, params: Sequence[float]) -> bool:
        """
        Rebuild the intrinsic from an optimizer parameter vector.

        Returns False and leaves the object untouched when the length does not
        match `param_count` or the values are not numeric.
        """

    @abstractmethod
    def subset_parameterization(self, adjust: IntrinsicParameterType) -> list[int]:
        """Indices of `get_params()` held constant for the given adjust flags."""

    def project(self, pose: Pose3, X: np.ndarray, ignore_distortion: bool = False) -> np.ndarray:
        """World point(s) (3,) or (N,3) -> pixel(s)."""
        X_cam = pose(X)
        x = X_cam[..., :2] / X_cam[..., 2:3]
        if self.have_distortion() and not ignore_distortion:
            return self.camera_to_image(self.add_distortion(x))
        return self.camera_to_image(x)

    def residual(self, pose: Pose3, X: np.ndarray, x: np.ndarray) -> np.ndarray:
        return np.asarray(x, dtype=np.float64) - self.project(pose, X)

    def is_valid(self) -> bool:
        return is_valid_type(self.get_type()) and self._w > 0 and self._h > 0

    def save(self, ar: dict[str, Any]) -> None:
        """Write the shared fields; families extend this with their own."""
        ar["width"] = self._w
        ar["height"] = self._h

    @staticmethod
    def load_base(ar: Mapping[str, Any]) -> tuple[int, int]:
        w = read_int(ar, "width")
        h = read_int(ar, "height")
        _require(w >= 0 and h >= 0, "width and height must be >= 0")
        return w, h

    @classmethod
    @abstractmethod
    def load(cls, ar: Mapping[str, Any]) -> "IntrinsicBase":
        """Build a fully-formed instance from archived fields."""
