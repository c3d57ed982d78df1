from __future__ import annotations

import copy
import logging
from typing import Literal

import numpy as np

from sfmcam.core.camera_types import IntrinsicParameterType
from sfmcam.core.geometry import Pose3
from sfmcam.core.intrinsic import IntrinsicBase
from sfmcam.core.pinhole import PinholeIntrinsic

logger = logging.getLogger(__name__)

_MIN_POINTS = 6


def _valid_correspondences(XYZ_cam: np.ndarray, uv_px: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    XYZ_cam = np.asarray(XYZ_cam, dtype=np.float64).reshape(-1, 3)
    uv_px = np.asarray(uv_px, dtype=np.float64).reshape(-1, 2)
    if XYZ_cam.shape[0] != uv_px.shape[0]:
        raise ValueError("XYZ_cam and uv_px must have matching sizes")
    Z = XYZ_cam[:, 2]
    good = np.isfinite(Z) & (Z > 1e-9) & np.all(np.isfinite(uv_px), axis=1) & np.all(np.isfinite(XYZ_cam), axis=1)
    if int(np.sum(good)) < _MIN_POINTS:
        raise ValueError(f"need >= {_MIN_POINTS} valid correspondences (Z>0 and finite)")
    return XYZ_cam[good], uv_px[good]


def init_pinhole_from_camera_points(
    *,
    XYZ_cam: np.ndarray,
    uv_px: np.ndarray,
    image_size: tuple[int, int],
) -> PinholeIntrinsic:
    """
    Linear estimate of (f, cx, cy) from camera-frame points and their pixels.

    Solves u = f x + cx, v = f y + cy in the least-squares sense with x = X/Z, y = Y/Z.
    """
    XYZ_cam, uv_px = _valid_correspondences(XYZ_cam, uv_px)
    x = XYZ_cam[:, 0] / XYZ_cam[:, 2]
    y = XYZ_cam[:, 1] / XYZ_cam[:, 2]
    n = x.shape[0]
    zeros = np.zeros(n, dtype=np.float64)
    ones = np.ones(n, dtype=np.float64)
    A = np.concatenate(
        [np.stack([x, ones, zeros], axis=1), np.stack([y, zeros, ones], axis=1)],
        axis=0,
    )
    b = np.concatenate([uv_px[:, 0], uv_px[:, 1]], axis=0)
    sol, *_ = np.linalg.lstsq(A, b, rcond=None)
    f, cx, cy = (float(v) for v in sol.tolist())
    w, h = int(image_size[0]), int(image_size[1])
    if not np.isfinite(f) or abs(f) < 1e-9:
        f = 1.5 * float(max(w, h))
    return PinholeIntrinsic(w, h, f, cx, cy)


def refine_intrinsic(
    intrinsic: IntrinsicBase,
    *,
    XYZ_cam: np.ndarray,
    uv_px: np.ndarray,
    adjust: IntrinsicParameterType = IntrinsicParameterType.ADJUST_ALL,
    loss: Literal["linear", "huber", "soft_l1", "cauchy", "arctan"] = "linear",
    f_scale_px: float = 2.0,
    max_nfev: int = 2000,
) -> dict[str, float]:
    """
    Refine an intrinsic in place from known 3D points in the *camera frame* and their
    observed pixels.

    The optimizer only sees the flat `get_params()` vector; parameters listed by
    `subset_parameterization(adjust)` are held constant. The result is written back
    with `update_from_params`.
    """
    from scipy.optimize import least_squares  # type: ignore

    XYZ_cam, uv_px = _valid_correspondences(XYZ_cam, uv_px)

    p0 = np.asarray(intrinsic.get_params(), dtype=np.float64)
    constant = set(intrinsic.subset_parameterization(adjust))
    free = np.array([i for i in range(p0.size) if i not in constant], dtype=np.intp)
    if free.size == 0:
        raise ValueError("no intrinsic parameter left to adjust")

    work = copy.deepcopy(intrinsic)
    pose = Pose3()

    def fun(q: np.ndarray) -> np.ndarray:
        p = p0.copy()
        p[free] = q
        work.update_from_params(p)
        return (work.project(pose, XYZ_cam) - uv_px).reshape(-1)

    r0 = fun(p0[free])
    sol = least_squares(
        fun,
        p0[free],
        method="trf",
        loss=str(loss),
        f_scale=float(f_scale_px),
        max_nfev=int(max_nfev),
    )

    p = p0.copy()
    p[free] = sol.x
    if not intrinsic.update_from_params(p):
        raise ValueError("optimizer produced a parameter vector of the wrong length")

    r = sol.fun.reshape(-1, 2)
    diag = {
        "opt_cost": float(sol.cost),
        "opt_nfev": float(sol.nfev),
        "opt_success": float(bool(sol.success)),
        "rms_px_before": float(np.sqrt(np.mean(np.sum(r0.reshape(-1, 2) ** 2, axis=1)))),
        "rms_px": float(np.sqrt(np.mean(np.sum(r * r, axis=1)))),
    }
    logger.debug("refined %r: %s", intrinsic, diag)
    return diag
