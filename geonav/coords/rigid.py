"""SE(3) rigid transforms (rotation + translation) for frame changes.

A RigidTransform T_a_b maps coordinates expressed in frame b into frame
a: p_a = R_a_b @ p_b + t_a_b. Equivalently it is the pose of frame b
expressed in frame a. Rotations are stored as unit quaternions
[qw, qx, qy, qz] so no gimbal-lock artifacts enter intermediate results.

Key functions:
    - compose: Chain two transforms (T_a_c = T_a_b ∘ T_b_c)
    - invert: Invert a transform (T_b_a = T_a_b⁻¹)
    - apply: Map points or transforms through a transform

Composition is associative but not commutative.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from geonav.coords.rotations import (
    IDENTITY_QUAT,
    euler_to_quat,
    quat_angle,
    quat_conjugate,
    quat_multiply,
    quat_normalize,
    quat_rotate,
    quat_to_euler,
    quat_to_rotation_matrix,
    rotation_matrix_to_quat,
)


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """Translation plus unit-quaternion rotation.

    The rotation is normalized on construction, so every instance
    (including composition results) carries a unit quaternion.

    Attributes:
        translation: Translation vector, shape (3,). Units: m.
        rotation: Unit quaternion [qw, qx, qy, qz], shape (4,).

    Example:
        >>> T = RigidTransform.from_euler([1.0, 0.0, 0.0], yaw=np.pi / 2)
        >>> T.apply(np.array([1.0, 0.0, 0.0]))  # rotate then translate
        array([1., 1., 0.])
    """

    translation: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    rotation: NDArray[np.float64] = field(default_factory=lambda: IDENTITY_QUAT.copy())

    def __post_init__(self) -> None:
        """Validate shapes and normalize the rotation."""
        translation = np.asarray(self.translation, dtype=np.float64).copy()
        if translation.shape != (3,):
            raise ValueError(
                f"RigidTransform.translation must have shape (3,), got {translation.shape}"
            )
        rotation = quat_normalize(self.rotation)

        translation.setflags(write=False)
        rotation.setflags(write=False)
        object.__setattr__(self, "translation", translation)
        object.__setattr__(self, "rotation", rotation)

    @classmethod
    def identity(cls) -> "RigidTransform":
        """Zero translation, identity rotation."""
        return cls()

    @classmethod
    def from_euler(
        cls,
        translation: Sequence[float],
        roll: float = 0.0,
        pitch: float = 0.0,
        yaw: float = 0.0,
    ) -> "RigidTransform":
        """Build from a translation and roll-pitch-yaw angles (radians)."""
        return cls(np.asarray(translation, dtype=np.float64), euler_to_quat(roll, pitch, yaw))

    @classmethod
    def from_matrix(cls, T: NDArray[np.float64]) -> "RigidTransform":
        """Build from a 4x4 homogeneous matrix.

        Raises:
            ValueError: If T is not 4x4.
        """
        T = np.asarray(T, dtype=np.float64)
        if T.shape != (4, 4):
            raise ValueError(f"Expected 4x4 matrix, got shape {T.shape}")
        return cls(T[:3, 3], rotation_matrix_to_quat(T[:3, :3]))

    @property
    def rotation_matrix(self) -> NDArray[np.float64]:
        """3x3 rotation matrix of the transform."""
        return quat_to_rotation_matrix(self.rotation)

    @property
    def euler(self) -> NDArray[np.float64]:
        """[roll, pitch, yaw] of the rotation, for display and configuration."""
        return quat_to_euler(self.rotation)

    def as_matrix(self) -> NDArray[np.float64]:
        """4x4 homogeneous matrix."""
        T = np.eye(4)
        T[:3, :3] = self.rotation_matrix
        T[:3, 3] = self.translation
        return T

    def with_translation(self, translation: Sequence[float]) -> "RigidTransform":
        """Copy with the translation replaced."""
        return RigidTransform(np.asarray(translation, dtype=np.float64), self.rotation)

    def compose(self, other: "RigidTransform") -> "RigidTransform":
        """Return self ∘ other (apply other first, then self)."""
        return compose(self, other)

    def inverse(self) -> "RigidTransform":
        """Return the inverse transform."""
        return invert(self)

    def apply(
        self, target: Union[NDArray[np.float64], "RigidTransform"]
    ) -> Union[NDArray[np.float64], "RigidTransform"]:
        """Apply this transform to points or to another transform."""
        return apply(self, target)

    def __matmul__(self, other: "RigidTransform") -> "RigidTransform":
        return compose(self, other)


def compose(a: RigidTransform, b: RigidTransform) -> RigidTransform:
    """Compose two rigid transforms: T = a ∘ b.

    Applying T to a point equals applying b, then a:
        t = R_a @ t_b + t_a
        q = q_a ⊗ q_b

    Frame bookkeeping: compose(T_a_b, T_b_c) = T_a_c.

    Args:
        a: Outer transform.
        b: Inner transform.

    Returns:
        Composed transform with a normalized rotation.
    """
    translation = quat_rotate(a.rotation, b.translation) + a.translation
    rotation = quat_multiply(a.rotation, b.rotation)
    return RigidTransform(translation, rotation)


def invert(a: RigidTransform) -> RigidTransform:
    """Invert a rigid transform.

    rotation = q⁻¹, translation = rotate(-t, q⁻¹), so that
    compose(a, invert(a)) is the identity up to floating-point error.
    """
    q_inv = quat_conjugate(a.rotation)
    return RigidTransform(quat_rotate(q_inv, -a.translation), q_inv)


def apply(
    a: RigidTransform,
    target: Union[NDArray[np.float64], RigidTransform],
) -> Union[NDArray[np.float64], RigidTransform]:
    """Apply a transform to points, or to a pose.

    Args:
        a: Transform to apply.
        target: A point (3,), a stack of points (N, 3), or a
                RigidTransform interpreted as a pose.

    Returns:
        Transformed points (rotate then translate) or the composed pose.

    Raises:
        ValueError: If points do not have a trailing dimension of 3.
    """
    if isinstance(target, RigidTransform):
        return compose(a, target)

    points = np.asarray(target, dtype=np.float64)
    if points.shape[-1:] != (3,) or points.ndim > 2:
        raise ValueError(f"Points must have shape (3,) or (N, 3), got {points.shape}")
    return quat_rotate(a.rotation, points) + a.translation


def rotation_angle_between(
    a: RigidTransform, b: Optional[RigidTransform] = None
) -> float:
    """Angle (radians) of the relative rotation between a and b.

    With b omitted, the angle between a and the identity.
    """
    if b is None:
        return quat_angle(a.rotation)
    return quat_angle(quat_multiply(quat_conjugate(a.rotation), b.rotation))
