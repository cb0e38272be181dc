"""Geodetic navigation frame relay.

This package relates poses expressed in geodetic, UTM and local world
frames for ground vehicles:
- coords: UTM projection, rigid transforms, rotations, covariance rotation
- relay: datum registry, frame-relay pipeline, configuration
- errors: error taxonomy shared by both
"""

__version__ = "0.1.0"
