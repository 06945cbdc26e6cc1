"""SE(3) transformation utilities for marker and anchor poses."""

import numpy as np
import cv2
from typing import Tuple

from .types import Pose


def rvec_tvec_to_matrix(rvec: np.ndarray, tvec: np.ndarray) -> np.ndarray:
    """
    Convert rotation vector and translation vector to 4x4 transformation matrix.

    Args:
        rvec: Rotation vector (3,) or (3,1)
        tvec: Translation vector (3,) or (3,1)

    Returns:
        4x4 homogeneous transformation matrix
    """
    rvec = np.asarray(rvec, dtype=float).reshape(3)
    tvec = np.asarray(tvec, dtype=float).reshape(3)

    R, _ = cv2.Rodrigues(rvec)

    T = np.eye(4)
    T[:3, :3] = R
    T[:3, 3] = tvec

    return T


def matrix_to_rvec_tvec(T: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert 4x4 transformation matrix to rotation vector and translation vector.

    Args:
        T: 4x4 homogeneous transformation matrix

    Returns:
        (rvec, tvec) where rvec is (3,1) and tvec is (3,1)
    """
    T = np.asarray(T, dtype=float)
    R = np.ascontiguousarray(T[:3, :3])
    tvec = T[:3, 3].reshape(3, 1)

    rvec, _ = cv2.Rodrigues(R)

    return rvec, tvec


def translation_pose(x: float, y: float, z: float = 0.0) -> Pose:
    """Pure translation with identity rotation."""
    return Pose(np.zeros(3), np.array([x, y, z], dtype=float))


def compose_pose(parent: Pose, child: Pose) -> Pose:
    """
    Express ``child`` (given in ``parent``'s local frame) in the world frame.

    T_world_child = T_world_parent @ T_parent_child
    """
    T = parent.matrix() @ child.matrix()
    return Pose.from_matrix(T)


def translation_distance(a: Pose, b: Pose) -> float:
    """Euclidean distance between the positions of two poses (meters)."""
    return float(np.linalg.norm(a.position - b.position))
