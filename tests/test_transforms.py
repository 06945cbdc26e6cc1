import numpy as np

from geo_anchor.transforms import (
    compose_pose,
    matrix_to_rvec_tvec,
    rvec_tvec_to_matrix,
    translation_distance,
    translation_pose,
)
from geo_anchor.types import Pose


def test_rvec_tvec_to_matrix():
    """Test conversion from rvec/tvec to 4x4 matrix."""
    rvec = np.array([0.1, 0.2, 0.3])
    tvec = np.array([1.0, 2.0, 3.0])

    T = rvec_tvec_to_matrix(rvec, tvec)

    assert T.shape == (4, 4)
    assert np.allclose(T[3, :], [0, 0, 0, 1])
    assert np.allclose(T[:3, 3], tvec)

    # Rotation matrix should be orthonormal
    R = T[:3, :3]
    assert np.allclose(R @ R.T, np.eye(3), atol=1e-6)
    assert np.allclose(np.linalg.det(R), 1.0, atol=1e-6)


def test_matrix_to_rvec_tvec():
    T = np.eye(4)
    T[:3, 3] = [1.0, 2.0, 3.0]

    rvec, tvec = matrix_to_rvec_tvec(T)

    assert rvec.shape == (3, 1)
    assert tvec.shape == (3, 1)
    assert np.allclose(tvec.flatten(), [1.0, 2.0, 3.0])
    assert np.allclose(rvec.flatten(), [0.0, 0.0, 0.0], atol=1e-6)


def test_pose_matrix_roundtrip():
    pose = Pose(np.array([0.1, 0.2, 0.3]), np.array([1.0, 2.0, 3.0]))
    back = Pose.from_matrix(pose.matrix())

    assert np.allclose(back.rvec, pose.rvec, atol=1e-6)
    assert np.allclose(back.tvec, pose.tvec, atol=1e-6)


def test_compose_with_identity_parent_is_child():
    child = translation_pose(0.1, -0.05)
    out = compose_pose(Pose.identity(), child)

    assert np.allclose(out.position, [0.1, -0.05, 0.0])
    assert np.allclose(out.rvec, 0.0, atol=1e-9)


def test_compose_applies_offset_in_parent_frame():
    """An x offset on a marker rotated 90 deg about z moves along world y."""
    parent = Pose(np.array([0.0, 0.0, np.pi / 2]), np.array([1.0, 0.0, 0.0]))
    out = compose_pose(parent, translation_pose(0.1, 0.0))

    assert np.allclose(out.position, [1.0, 0.1, 0.0], atol=1e-9)
    assert np.allclose(out.rvec, parent.rvec, atol=1e-6)


def test_translation_distance():
    a = translation_pose(0.0, 0.0, 0.0)
    b = translation_pose(0.03, 0.04, 0.0)
    assert np.isclose(translation_distance(a, b), 0.05)
    assert translation_distance(a, a) == 0.0
