from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class BrownDistortion:
    """
    Brown-Conrady distortion on normalized camera coordinates (x=X/Z, y=Y/Z).

      radial: k1, k2, k3
      tangential: t1, t2 (OpenCV calls them p1, p2)

    distort(x, y) = (x, y) + (x * (k1 r^2 + k2 r^4 + k3 r^6) + tx, y * (...) + ty)
    """

    k1: float = 0.0
    k2: float = 0.0
    k3: float = 0.0
    t1: float = 0.0
    t2: float = 0.0

    def distort(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        r2 = x * x + y * y
        r4 = r2 * r2
        r6 = r4 * r2
        k_diff = self.k1 * r2 + self.k2 * r4 + self.k3 * r6
        xy = x * y
        x_tan = 2.0 * self.t1 * xy + self.t2 * (r2 + 2.0 * x * x)
        y_tan = self.t1 * (r2 + 2.0 * y * y) + 2.0 * self.t2 * xy
        return x + x * k_diff + x_tan, y + y * k_diff + y_tan

    def undistort(
        self, xd: np.ndarray, yd: np.ndarray, max_iterations: int = 50, eps: float = 1e-12
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Fixed-point inverse of distort(), valid for small/moderate distortion.

        Stops once the largest update drops below `eps`.
        """
        xd = np.asarray(xd, dtype=np.float64)
        yd = np.asarray(yd, dtype=np.float64)
        x = xd.copy()
        y = yd.copy()
        for _ in range(int(max_iterations)):
            x_est, y_est = self.distort(x, y)
            dx = xd - x_est
            dy = yd - y_est
            x += dx
            y += dy
            if x.size == 0 or max(float(np.max(np.abs(dx))), float(np.max(np.abs(dy)))) < eps:
                break
        return x, y
