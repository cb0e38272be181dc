"""Quaternion algebra for rigid-transform orientation.

Orientations are stored as unit quaternions throughout the relay; Euler
angles only appear at the boundary (datum yaw configuration, display).

Conventions:
- Quaternions: [qw, qx, qy, qz] where qw is the scalar part
- Hamilton product, active rotation: v' = q ⊗ v ⊗ q*
- Euler angles: [roll, pitch, yaw] in radians (ZYX/3-2-1 convention)

Message transports that use [x, y, z, w] ordering should convert with
``quat_from_xyzw`` / ``quat_to_xyzw`` at the boundary.
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def as_quat(q: Sequence[float]) -> NDArray[np.float64]:
    """Coerce input to a float64 quaternion array of shape (4,).

    Args:
        q: Quaternion [qw, qx, qy, qz] as any array-like.

    Returns:
        Quaternion as a float64 array of shape (4,).

    Raises:
        ValueError: If q does not have 4 elements.
    """
    q = np.asarray(q, dtype=np.float64)
    if q.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {q.shape}")
    return q


def quat_normalize(q: Sequence[float]) -> NDArray[np.float64]:
    """Normalize a quaternion to unit length.

    The sign is left untouched, so q and -q (the same rotation) stay
    distinguishable for callers that pass orientations through.

    Args:
        q: Quaternion [qw, qx, qy, qz], any non-zero norm.

    Returns:
        Unit quaternion with the same direction as q.

    Raises:
        ValueError: If q has zero norm.

    Example:
        >>> quat_normalize([2.0, 0.0, 0.0, 0.0])
        array([1., 0., 0., 0.])
    """
    q = as_quat(q)
    norm = np.linalg.norm(q)
    if norm < 1e-12:
        raise ValueError("Cannot normalize a zero quaternion")
    return q / norm


def quat_conjugate(q: Sequence[float]) -> NDArray[np.float64]:
    """Conjugate of a quaternion.

    For a unit quaternion the conjugate is the inverse rotation.

    Args:
        q: Quaternion [qw, qx, qy, qz].

    Returns:
        [qw, -qx, -qy, -qz].
    """
    qw, qx, qy, qz = as_quat(q)
    return np.array([qw, -qx, -qy, -qz], dtype=np.float64)


def quat_multiply(p: Sequence[float], q: Sequence[float]) -> NDArray[np.float64]:
    """Hamilton product p ⊗ q.

    The result rotates by q first, then by p.

    Example:
        >>> qz90 = euler_to_quat(0.0, 0.0, np.pi / 2)
        >>> q = quat_multiply(qz90, qz90)
        >>> np.allclose(quat_to_euler(q), [0.0, 0.0, np.pi])
        True
    """
    pw, px, py, pz = as_quat(p)
    qw, qx, qy, qz = as_quat(q)
    return np.array(
        [
            pw * qw - px * qx - py * qy - pz * qz,
            pw * qx + px * qw + py * qz - pz * qy,
            pw * qy - px * qz + py * qw + pz * qx,
            pw * qz + px * qy - py * qx + pz * qw,
        ],
        dtype=np.float64,
    )


def quat_rotate(q: Sequence[float], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate vectors by a unit quaternion.

    Equivalent to q ⊗ v ⊗ q* for each vector, evaluated through the
    rotation matrix so a whole stack is rotated in one product.

    Args:
        q: Unit quaternion [qw, qx, qy, qz].
        v: Vector of shape (3,) or stack of vectors of shape (N, 3).

    Returns:
        Rotated vector(s), same shape as v.

    Example:
        >>> q = euler_to_quat(0.0, 0.0, np.pi / 2)  # 90° yaw
        >>> np.allclose(quat_rotate(q, np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0])
        True
    """
    R = quat_to_rotation_matrix(q)
    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 1:
        return R @ v
    return v @ R.T


def quat_angle(q: Sequence[float]) -> float:
    """Rotation angle of a quaternion.

    Uses atan2 of the vector and scalar parts, which stays accurate for
    angles near zero where acos(qw) loses precision. The absolute value
    of qw folds q and -q onto the same angle.

    Args:
        q: Quaternion [qw, qx, qy, qz] (normalized internally).

    Returns:
        Angle in [0, π] radians; 0 for the identity.

    Example:
        >>> round(quat_angle(euler_to_quat(0.0, 0.0, 0.3)), 12)
        0.3
    """
    q = quat_normalize(q)
    vec_norm = np.linalg.norm(q[1:])
    return float(2.0 * np.arctan2(vec_norm, abs(q[0])))


def quat_from_xyzw(q_xyzw: Sequence[float]) -> NDArray[np.float64]:
    """Reorder an [x, y, z, w] quaternion into [w, x, y, z].

    Example:
        >>> quat_from_xyzw([0.0, 0.0, 0.0, 1.0])
        array([1., 0., 0., 0.])
    """
    x, y, z, w = as_quat(q_xyzw)
    return np.array([w, x, y, z], dtype=np.float64)


def quat_to_xyzw(q: Sequence[float]) -> NDArray[np.float64]:
    """Reorder a [w, x, y, z] quaternion into [x, y, z, w]."""
    w, x, y, z = as_quat(q)
    return np.array([x, y, z, w], dtype=np.float64)


def euler_to_quat(
    roll: float,
    pitch: float,
    yaw: float,
) -> NDArray[np.float64]:
    """Convert roll-pitch-yaw (ZYX) to a unit quaternion [qw, qx, qy, qz].

    Example:
        >>> q = euler_to_quat(0.0, 0.0, np.pi / 2)  # 90° yaw
        >>> np.allclose(q, [np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])
        True
    """
    cr, sr = np.cos(roll / 2.0), np.sin(roll / 2.0)
    cp, sp = np.cos(pitch / 2.0), np.sin(pitch / 2.0)
    cy, sy = np.cos(yaw / 2.0), np.sin(yaw / 2.0)

    return np.array(
        [
            cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
        ],
        dtype=np.float64,
    )


def quat_to_euler(q: Sequence[float]) -> NDArray[np.float64]:
    """Extract roll-pitch-yaw (ZYX) from a unit quaternion.

    Pitch is clamped at ±90° so near-gimbal-lock inputs stay finite.

    Args:
        q: Unit quaternion [qw, qx, qy, qz].

    Returns:
        [roll, pitch, yaw] in radians.

    Example:
        >>> np.round(quat_to_euler(euler_to_quat(0.1, 0.2, 0.3)), 12)
        array([0.1, 0.2, 0.3])
    """
    qw, qx, qy, qz = as_quat(q)

    roll = np.arctan2(2.0 * (qw * qx + qy * qz), 1.0 - 2.0 * (qx * qx + qy * qy))
    pitch = np.arcsin(np.clip(2.0 * (qw * qy - qz * qx), -1.0, 1.0))
    yaw = np.arctan2(2.0 * (qw * qz + qx * qy), 1.0 - 2.0 * (qy * qy + qz * qz))

    return np.array([roll, pitch, yaw], dtype=np.float64)


def quat_to_rotation_matrix(q: Sequence[float]) -> NDArray[np.float64]:
    """Convert a unit quaternion to a 3x3 rotation matrix.

    Args:
        q: Unit quaternion [qw, qx, qy, qz].

    Returns:
        R such that v_parent = R @ v_child.

    Example:
        >>> R = quat_to_rotation_matrix([1.0, 0.0, 0.0, 0.0])
        >>> np.allclose(R, np.eye(3))
        True
    """
    qw, qx, qy, qz = as_quat(q)

    xx, yy, zz = qx * qx, qy * qy, qz * qz
    xy, xz, yz = qx * qy, qx * qz, qy * qz
    wx, wy, wz = qw * qx, qw * qy, qw * qz

    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=np.float64,
    )


def rotation_matrix_to_quat(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert a 3x3 rotation matrix to a unit quaternion.

    Uses Shepperd's method, branching on the largest of the trace and the
    diagonal entries.

    Args:
        R: 3x3 rotation matrix.

    Returns:
        Unit quaternion [qw, qx, qy, qz]. The sign of qw is not fixed.

    Raises:
        ValueError: If R is not a 3x3 matrix.
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    trace = np.trace(R)
    if trace > 0:
        s = 2.0 * np.sqrt(trace + 1.0)
        q = [0.25 * s, (R[2, 1] - R[1, 2]) / s, (R[0, 2] - R[2, 0]) / s, (R[1, 0] - R[0, 1]) / s]
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
        q = [(R[2, 1] - R[1, 2]) / s, 0.25 * s, (R[0, 1] + R[1, 0]) / s, (R[0, 2] + R[2, 0]) / s]
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
        q = [(R[0, 2] - R[2, 0]) / s, (R[0, 1] + R[1, 0]) / s, 0.25 * s, (R[1, 2] + R[2, 1]) / s]
    else:
        s = 2.0 * np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
        q = [(R[1, 0] - R[0, 1]) / s, (R[0, 2] + R[2, 0]) / s, (R[1, 2] + R[2, 1]) / s, 0.25 * s]

    return quat_normalize(q)
