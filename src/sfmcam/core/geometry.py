from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


def frozen_array(a: Any) -> np.ndarray:
    a = np.array(a, dtype=np.float64)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class Pose3:
    """
    Rigid pose of a camera, stored as rotation and camera center.

    Convention: a world point X maps to the camera frame as X_cam = R (X - C),
    therefore the translation of the [R|t] form is t = -R C.
    """

    R: np.ndarray = field(default_factory=lambda: np.eye(3))  # (3,3) world -> camera
    C: np.ndarray = field(default_factory=lambda: np.zeros(3))  # (3,) center in world frame

    def __post_init__(self) -> None:
        object.__setattr__(self, "R", frozen_array(np.asarray(self.R, dtype=np.float64).reshape(3, 3)))
        object.__setattr__(self, "C", frozen_array(np.asarray(self.C, dtype=np.float64).reshape(3)))

    @classmethod
    def from_rotvec(cls, rvec: np.ndarray, center: np.ndarray | None = None) -> "Pose3":
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        rvec = np.asarray(rvec, dtype=np.float64).reshape(3)
        Rm = Rot.from_rotvec(rvec).as_matrix()
        return cls(R=Rm, C=np.zeros(3) if center is None else center)

    @classmethod
    def from_rt(cls, R: np.ndarray, t: np.ndarray) -> "Pose3":
        R = np.asarray(R, dtype=np.float64).reshape(3, 3)
        t = np.asarray(t, dtype=np.float64).reshape(3)
        return cls(R=R, C=-R.T @ t)

    def rotation(self) -> np.ndarray:
        return self.R

    def center(self) -> np.ndarray:
        return self.C

    def translation(self) -> np.ndarray:
        return -self.R @ self.C

    def __call__(self, X: np.ndarray) -> np.ndarray:
        """Transform world point(s) (3,) or (N,3) into the camera frame."""
        X = np.asarray(X, dtype=np.float64)
        return (X - self.C) @ self.R.T

    def inverse(self) -> "Pose3":
        return Pose3(R=self.R.T, C=self.translation())


def p_from_krt(K: np.ndarray, R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Assemble the 3x4 projection matrix P = K [R | t]."""
    K = np.asarray(K, dtype=np.float64).reshape(3, 3)
    R = np.asarray(R, dtype=np.float64).reshape(3, 3)
    t = np.asarray(t, dtype=np.float64).reshape(3, 1)
    return K @ np.hstack([R, t])


def krt_from_p(P: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Decompose a projection matrix into (K, R, t) with P ~ K [R | t].

    K is upper-triangular with a positive diagonal and K[2,2] = 1; R is a proper
    rotation (det = +1).
    """
    from scipy.linalg import rq  # type: ignore

    P = np.asarray(P, dtype=np.float64).reshape(3, 4)
    K, R = rq(P[:, :3])

    s = np.sign(np.diag(K))
    s[s == 0] = 1.0
    D = np.diag(s)
    K = K @ D
    R = D @ R
    t = np.linalg.solve(K, P[:, 3])

    # P and -P describe the same camera.
    if np.linalg.det(R) < 0:
        R = -R
        t = -t

    K = K / K[2, 2]
    return K, R, t


def triangulate_dlt(P1: np.ndarray, x1: np.ndarray, P2: np.ndarray, x2: np.ndarray) -> np.ndarray:
    """
    Linear (DLT) two-view triangulation.

    x1/x2 are pixel coordinates of shape (2,) or (N,2); returns (3,) or (N,3).
    """
    P1 = np.asarray(P1, dtype=np.float64).reshape(3, 4)
    P2 = np.asarray(P2, dtype=np.float64).reshape(3, 4)
    x1 = np.asarray(x1, dtype=np.float64)
    x2 = np.asarray(x2, dtype=np.float64)
    single = x1.ndim == 1
    u1 = x1.reshape(-1, 2)
    u2 = x2.reshape(-1, 2)
    if u1.shape != u2.shape:
        raise ValueError("x1 and x2 must have the same shape")

    A = np.stack(
        [
            u1[:, 0:1] * P1[2] - P1[0],
            u1[:, 1:2] * P1[2] - P1[1],
            u2[:, 0:1] * P2[2] - P2[0],
            u2[:, 1:2] * P2[2] - P2[1],
        ],
        axis=1,
    )  # (N,4,4)
    _u, _s, vt = np.linalg.svd(A)
    Xh = vt[:, -1, :]
    X = Xh[:, :3] / Xh[:, 3:4]
    return X[0] if single else X
