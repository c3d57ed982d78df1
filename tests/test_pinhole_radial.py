import numpy as np
import pytest

from sfmcam.core.camera_types import EIntrinsic, IntrinsicParameterType
from sfmcam.core.distortion import BrownDistortion
from sfmcam.core.pinhole_radial import PinholeBrownT2, PinholeRadialK1, PinholeRadialK3


def _cameras():
    return [
        PinholeRadialK1(1280, 720, 900.0, 640.0, 360.0, -0.12),
        PinholeRadialK3(1280, 720, 900.0, 640.0, 360.0, -0.12, 0.03, -0.004),
        PinholeBrownT2(1280, 720, 900.0, 640.0, 360.0, -0.12, 0.03, -0.004, 0.001, -0.0015),
    ]


def test_types_and_param_layout():
    k1, k3, t2 = _cameras()
    assert k1.get_type() == EIntrinsic.PINHOLE_CAMERA_RADIAL1
    assert k3.get_type() == EIntrinsic.PINHOLE_CAMERA_RADIAL3
    assert t2.get_type() == EIntrinsic.PINHOLE_CAMERA_BROWN
    assert k1.get_params() == [900.0, 640.0, 360.0, -0.12]
    assert k3.get_params() == [900.0, 640.0, 360.0, -0.12, 0.03, -0.004]
    assert t2.get_params() == [900.0, 640.0, 360.0, -0.12, 0.03, -0.004, 0.001, -0.0015]
    for cam in (k1, k3, t2):
        assert cam.have_distortion()
        assert len(cam.get_params()) == cam.param_count


def test_brown_matches_opencv_convention():
    # OpenCV: x_d = x (1 + k1 r2 + k2 r4 + k3 r6) + 2 p1 x y + p2 (r2 + 2 x^2)
    d = BrownDistortion(k1=0.1, k2=-0.02, k3=0.003, t1=0.004, t2=-0.005)
    x, y = 0.3, -0.2
    r2 = x * x + y * y
    radial = 1.0 + 0.1 * r2 - 0.02 * r2**2 + 0.003 * r2**3
    xd_ref = x * radial + 2.0 * 0.004 * x * y + (-0.005) * (r2 + 2.0 * x * x)
    yd_ref = y * radial + 0.004 * (r2 + 2.0 * y * y) + 2.0 * (-0.005) * x * y
    xd, yd = d.distort(np.array([x]), np.array([y]))
    assert xd[0] == pytest.approx(xd_ref, abs=1e-15)
    assert yd[0] == pytest.approx(yd_ref, abs=1e-15)


def test_add_remove_distortion_roundtrip():
    rng = np.random.default_rng(0)
    p = rng.uniform(-0.6, 0.6, size=(400, 2))
    for cam in _cameras():
        assert np.max(np.abs(cam.add_distortion(cam.remove_distortion(p)) - p)) < 1e-9
        assert np.max(np.abs(cam.remove_distortion(cam.add_distortion(p)) - p)) < 1e-9


def test_pixel_distortion_roundtrip_and_non_identity():
    rng = np.random.default_rng(1)
    for cam in _cameras():
        u = rng.uniform(0.0, cam.width - 1, size=(300, 1))
        v = rng.uniform(0.0, cam.height - 1, size=(300, 1))
        p = np.concatenate([u, v], axis=1)
        pd = cam.get_distorted_pixel(p)
        assert np.max(np.abs(pd - p)) > 1.0
        assert np.max(np.abs(cam.get_undistorted_pixel(pd) - p)) < 1e-6


def test_bearing_vector_removes_distortion():
    rng = np.random.default_rng(2)
    for cam in _cameras():
        x = rng.uniform(-0.5, 0.5, size=(200, 2))
        p = cam.camera_to_image(cam.add_distortion(x))
        d = cam.bearing_vector(p)
        assert np.max(np.abs(np.linalg.norm(d, axis=1) - 1.0)) < 1e-12
        assert np.max(np.abs(d[:, :2] / d[:, 2:3] - x)) < 1e-9


def test_update_from_params_rebuilds_distortion():
    cam = PinholeBrownT2(1280, 720, 900.0, 640.0, 360.0)
    new = [950.0, 630.0, 350.0, 0.01, 0.02, 0.03, 0.04, 0.05]
    assert cam.update_from_params(new)
    assert cam.get_params() == new
    assert cam.distortion().t2 == 0.05
    assert (cam.width, cam.height) == (1280, 720)
    assert cam.update_from_params(new[:3]) is False
    assert cam.get_params() == new


def test_subset_parameterization_distortion():
    cam = PinholeRadialK3(1280, 720, 900.0, 640.0, 360.0)
    adjust = IntrinsicParameterType.ADJUST_FOCAL_LENGTH | IntrinsicParameterType.ADJUST_PRINCIPAL_POINT
    assert cam.subset_parameterization(adjust) == [3, 4, 5]
    assert cam.subset_parameterization(IntrinsicParameterType.ADJUST_DISTORTION) == [0, 1, 2]
