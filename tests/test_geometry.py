import numpy as np

from sfmcam.core.geometry import Pose3, krt_from_p, p_from_krt, triangulate_dlt
from sfmcam.core.pinhole import PinholeIntrinsic


def test_pose_translation_and_inverse():
    pose = Pose3.from_rotvec(np.array([0.3, -0.1, 0.2]), center=np.array([1.0, 2.0, 3.0]))
    R = pose.rotation()
    assert np.max(np.abs(R @ R.T - np.eye(3))) < 1e-12
    assert np.max(np.abs(pose.translation() + R @ pose.center())) < 1e-12
    # The camera center maps to the origin of the camera frame.
    assert np.max(np.abs(pose(pose.center()))) < 1e-12

    X = np.array([[0.5, -0.3, 7.0], [1.0, 1.0, 1.0]])
    back = pose.inverse()(pose(X))
    assert np.max(np.abs(back - X)) < 1e-12

    again = Pose3.from_rt(R, pose.translation())
    assert np.max(np.abs(again.center() - pose.center())) < 1e-12


def test_krt_roundtrip():
    cam = PinholeIntrinsic(1920, 1080, 1000.0, 960.0, 540.0)
    pose = Pose3.from_rotvec(np.array([0.05, 0.4, -0.1]), center=np.array([-2.0, 0.5, 1.0]))
    P = cam.projective_matrix(pose)
    K, R, t = krt_from_p(3.7 * P)
    assert np.max(np.abs(K - cam.K())) < 1e-8
    assert np.max(np.abs(R - pose.rotation())) < 1e-10
    assert np.max(np.abs(t - pose.translation())) < 1e-8
    assert np.max(np.abs(p_from_krt(K, R, t) - P)) < 1e-6


def test_triangulation_dlt_hits_known_points():
    rng = np.random.default_rng(0)
    cam = PinholeIntrinsic(1920, 1080, 1000.0, 960.0, 540.0)
    pose1 = Pose3()
    pose2 = Pose3.from_rotvec(np.array([0.0, -0.1, 0.0]), center=np.array([1.0, 0.0, 0.0]))
    P1 = cam.projective_matrix(pose1)
    P2 = cam.projective_matrix(pose2)

    X = np.stack([rng.uniform(-1.0, 1.0, 50), rng.uniform(-1.0, 1.0, 50), rng.uniform(5.0, 10.0, 50)], axis=1)
    x1 = cam.project(pose1, X)
    x2 = cam.project(pose2, X)
    Xt = triangulate_dlt(P1, x1, P2, x2)
    assert Xt.shape == (50, 3)
    assert np.max(np.abs(Xt - X)) < 1e-6

    single = triangulate_dlt(P1, x1[0], P2, x2[0])
    assert single.shape == (3,)
    assert np.linalg.norm(single - X[0]) < 1e-6


def test_krt_from_negated_projection_is_upper_triangular_rotation():
    cam = PinholeIntrinsic(640, 480, 500.0, 320.0, 240.0)
    pose = Pose3.from_rotvec(np.array([-0.3, 0.2, 0.7]), center=np.array([0.1, -0.4, -2.0]))
    P = cam.projective_matrix(pose)
    K, R, t = krt_from_p(-P)
    assert np.allclose(np.tril(K, -1), 0.0, atol=1e-9)
    assert np.all(np.diag(K) > 0)
    assert abs(np.linalg.det(R) - 1.0) < 1e-10
    assert np.max(np.abs(R @ R.T - np.eye(3))) < 1e-10
    assert np.max(np.abs(K - cam.K())) < 1e-8
    assert np.max(np.abs(t - pose.translation())) < 1e-8
