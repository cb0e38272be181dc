"""Pose covariance helpers and frame-change rotation.

Pose covariances are 6x6 matrices ordered (x, y, z, roll, pitch, yaw).
At message boundaries they travel as 36 values in row-major order.

Rotation of a covariance into a new frame is the similarity transform

    cov' = R6 @ cov @ R6.T,    R6 = blkdiag(R, R)

Note:
    The same 3x3 rotation is applied to the orientation block as to the
    position block. This treats orientation uncertainty as if it were
    expressed in the position basis, which is exact for the datum frames
    used here (no roll/pitch between UTM and world) but only an
    approximation in general. It is kept deliberately; see DESIGN.md.
"""

from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from geonav.coords.rotations import quat_to_rotation_matrix

POSITION_SIZE = 3
POSE_SIZE = 6


def covariance_from_row_major(values: Sequence[float]) -> NDArray[np.float64]:
    """Build a 6x6 covariance from 36 row-major values.

    Raises:
        ValueError: If values does not hold exactly 36 numbers.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size != POSE_SIZE * POSE_SIZE:
        raise ValueError(
            f"Expected {POSE_SIZE * POSE_SIZE} covariance values, got {values.size}"
        )
    return values.reshape(POSE_SIZE, POSE_SIZE).copy()


def covariance_to_row_major(cov: NDArray[np.float64]) -> NDArray[np.float64]:
    """Flatten a 6x6 covariance into 36 row-major values."""
    return validate_covariance(cov).reshape(-1).copy()


def validate_covariance(
    cov: NDArray[np.float64],
    atol: float = 1e-9,
) -> NDArray[np.float64]:
    """Check that cov is a finite, symmetric 6x6 matrix.

    Args:
        cov: Candidate covariance.
        atol: Absolute tolerance for the symmetry check.

    Returns:
        cov as a float64 array.

    Raises:
        ValueError: If the shape is wrong, entries are non-finite, or the
                    matrix is not symmetric.
    """
    cov = np.asarray(cov, dtype=np.float64)
    if cov.shape != (POSE_SIZE, POSE_SIZE):
        raise ValueError(f"Covariance must have shape (6, 6), got {cov.shape}")
    if not np.all(np.isfinite(cov)):
        raise ValueError("Covariance contains non-finite entries")
    if not np.allclose(cov, cov.T, atol=atol, rtol=0.0):
        raise ValueError("Covariance must be symmetric")
    return cov


def block_rotation(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Place R on both diagonal 3x3 blocks of a 6x6 operator.

    Raises:
        ValueError: If R is not 3x3.
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (POSITION_SIZE, POSITION_SIZE):
        raise ValueError(f"Expected 3x3 rotation, got shape {R.shape}")

    R6 = np.zeros((POSE_SIZE, POSE_SIZE), dtype=np.float64)
    R6[:POSITION_SIZE, :POSITION_SIZE] = R
    R6[POSITION_SIZE:, POSITION_SIZE:] = R
    return R6


def rotate_covariance(
    cov: NDArray[np.float64],
    rotation: Union[NDArray[np.float64], Sequence[float]],
) -> NDArray[np.float64]:
    """Express a pose covariance in a rotated frame.

    Args:
        cov: Symmetric 6x6 covariance.
        rotation: Unit quaternion [qw, qx, qy, qz] or 3x3 rotation matrix.

    Returns:
        R6 @ cov @ R6.T, symmetrized to remove round-off asymmetry.
        Eigenvalues are preserved since R6 is orthonormal.

    Example:
        >>> cov = np.diag([1.0, 4.0, 9.0, 0.1, 0.1, 0.1])
        >>> q = np.array([np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])
        >>> np.round(np.diag(rotate_covariance(cov, q)), 6)
        array([4. , 1. , 9. , 0.1, 0.1, 0.1])
    """
    cov = validate_covariance(cov)

    rotation = np.asarray(rotation, dtype=np.float64)
    if rotation.shape == (4,):
        R = quat_to_rotation_matrix(rotation)
    else:
        R = rotation

    R6 = block_rotation(R)
    rotated = R6 @ cov @ R6.T
    return 0.5 * (rotated + rotated.T)
