"""Coordinate frames and transformations for the geodetic frame relay.

This module provides:
- UTM projection between geodetic (LLA) and projected coordinates
- SE(3) rigid transforms with quaternion rotations
- Quaternion algebra and Euler conversions
- Rotation of 6x6 pose covariances into a new frame
- Frame identifiers
"""

from geonav.coords.covariance import (
    block_rotation,
    covariance_from_row_major,
    covariance_to_row_major,
    rotate_covariance,
    validate_covariance,
)
from geonav.coords.frames import (
    BASE_LINK_FRAME,
    UTM_FRAME,
    WORLD_FRAME,
    FrameId,
    FrameType,
    append_prefix,
)
from geonav.coords.rigid import RigidTransform, apply, compose, invert, rotation_angle_between
from geonav.coords.rotations import (
    euler_to_quat,
    quat_conjugate,
    quat_from_xyzw,
    quat_multiply,
    quat_normalize,
    quat_to_euler,
    quat_to_rotation_matrix,
    quat_to_xyzw,
    rotation_matrix_to_quat,
)
from geonav.coords.utm import (
    GeoPoint,
    UtmPoint,
    ll_to_utm,
    normalize_longitude,
    parse_utm_zone,
    utm_to_ll,
    utm_zone_number,
)

__all__ = [
    # Frames
    "FrameId",
    "FrameType",
    "append_prefix",
    "UTM_FRAME",
    "WORLD_FRAME",
    "BASE_LINK_FRAME",
    # Projection
    "GeoPoint",
    "UtmPoint",
    "ll_to_utm",
    "utm_to_ll",
    "normalize_longitude",
    "parse_utm_zone",
    "utm_zone_number",
    # Rigid transforms
    "RigidTransform",
    "compose",
    "invert",
    "apply",
    "rotation_angle_between",
    # Rotations
    "euler_to_quat",
    "quat_conjugate",
    "quat_from_xyzw",
    "quat_multiply",
    "quat_normalize",
    "quat_to_euler",
    "quat_to_rotation_matrix",
    "quat_to_xyzw",
    "rotation_matrix_to_quat",
    # Covariance
    "block_rotation",
    "covariance_from_row_major",
    "covariance_to_row_major",
    "rotate_covariance",
    "validate_covariance",
]
