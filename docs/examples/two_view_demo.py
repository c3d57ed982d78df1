"""
Two-view demo (pinhole intrinsics).

It does:
1) build a camera and two poses, project synthetic 3D points,
2) triangulate them back through the 3x4 projective matrices,
3) refine a perturbed intrinsic from the correspondences,
4) save/reload the intrinsic collection as JSON.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import numpy as np

from sfmcam import PinholeIntrinsic, Pose3, load_intrinsics, save_intrinsics
from sfmcam.core.geometry import triangulate_dlt
from sfmcam.core.intrinsic_fit import refine_intrinsic


def summarize(vals: np.ndarray) -> dict[str, float]:
    v = np.asarray(vals, dtype=np.float64).reshape(-1)
    if v.size == 0:
        return {"n": 0, "rms": float("nan"), "p95": float("nan"), "max": float("nan")}
    return {
        "n": int(v.size),
        "rms": float(np.sqrt(np.mean(v * v))),
        "p95": float(np.quantile(v, 0.95)),
        "max": float(np.max(v)),
    }


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--out", type=Path, default=Path("intrinsics.json"))
    parser.add_argument("--points", type=int, default=200)
    parser.add_argument("--noise-px", type=float, default=0.25)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    cam = PinholeIntrinsic(1920, 1080, 1000.0, 960.0, 540.0)
    pose_l = Pose3()
    pose_r = Pose3.from_rotvec(np.array([0.0, -0.05, 0.0]), center=np.array([0.5, 0.0, 0.0]))

    n = int(args.points)
    XYZ = np.stack([rng.uniform(-2.0, 2.0, n), rng.uniform(-1.0, 1.0, n), rng.uniform(6.0, 12.0, n)], axis=1)
    uv_l = cam.project(pose_l, XYZ) + rng.normal(scale=args.noise_px, size=(n, 2))
    uv_r = cam.project(pose_r, XYZ) + rng.normal(scale=args.noise_px, size=(n, 2))

    X_hat = triangulate_dlt(cam.projective_matrix(pose_l), uv_l, cam.projective_matrix(pose_r), uv_r)
    print("triangulation error:", json.dumps(summarize(np.linalg.norm(X_hat - XYZ, axis=1))))

    guess = PinholeIntrinsic(1920, 1080, 950.0, 940.0, 560.0)
    diag = refine_intrinsic(guess, XYZ_cam=XYZ, uv_px=uv_l)
    print("refinement:", json.dumps(diag, sort_keys=True), "->", guess.get_params())

    save_intrinsics(args.out, {0: cam, 1: guess})
    for key, intr in load_intrinsics(args.out).items():
        print(key, intr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
