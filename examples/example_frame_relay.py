"""Example: Relaying geodetic measurements into UTM and world frames.

This example walks through the pieces of the frame relay:
1. Project latitude/longitude to UTM and back
2. Compose and invert rigid transforms
3. Rotate a pose covariance into another frame
4. Set a datum and relay a few measurements
5. Drop a bad measurement without stopping the pipeline
"""

import sys
import warnings
from pathlib import Path

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from geonav.coords import (
    RigidTransform,
    compose,
    euler_to_quat,
    invert,
    ll_to_utm,
    rotate_covariance,
    utm_to_ll,
)
from geonav.relay import DatumRegistry, FrameRelay, PoseSample, world_to_geodetic


def main() -> None:
    """Run frame relay examples."""
    print("=" * 70)
    print("Geodetic Frame Relay Examples")
    print("=" * 70)

    # Example 1: UTM projection
    print("\n1. Latitude/Longitude -> UTM")
    print("-" * 70)

    lat, lon = 45.0, -93.0
    utm = ll_to_utm(lat, lon)
    print(f"Geodetic: {lat:.6f}°, {lon:.6f}°")
    print(f"UTM:      {utm.easting:,.3f} E, {utm.northing:,.3f} N, zone {utm.zone}")

    geo = utm_to_ll(utm.easting, utm.northing, utm.zone)
    print(f"Back:     {geo.latitude:.9f}°, {geo.longitude:.9f}°")

    # Example 2: Rigid transforms
    print("\n2. Rigid Transform Composition")
    print("-" * 70)

    T_a_b = RigidTransform.from_euler([10.0, 0.0, 0.0], yaw=np.deg2rad(90.0))
    T_b_c = RigidTransform.from_euler([1.0, 0.0, 0.0])
    T_a_c = compose(T_a_b, T_b_c)
    print(f"T_a_b translation: {T_a_b.translation}, yaw 90°")
    print(f"T_b_c translation: {T_b_c.translation}")
    print(f"T_a_c translation: {np.round(T_a_c.translation, 6)}")

    identity = compose(T_a_b, invert(T_a_b))
    print(f"T_a_b ∘ T_a_b⁻¹ translation: {np.round(identity.translation, 12)}")

    # Example 3: Covariance rotation
    print("\n3. Covariance Rotation")
    print("-" * 70)

    cov = np.diag([4.0, 1.0, 9.0, 0.01, 0.01, 0.04])
    q_yaw = euler_to_quat(0.0, 0.0, np.deg2rad(90.0))
    cov_rot = rotate_covariance(cov, q_yaw)
    print(f"Input variances:   {np.diag(cov)}")
    print(f"Rotated variances: {np.round(np.diag(cov_rot), 6)}")
    print(f"Eigenvalues kept:  {np.allclose(np.linalg.eigvalsh(cov), np.linalg.eigvalsh(cov_rot))}")

    # Example 4: Datum and relay
    print("\n4. Relaying Measurements")
    print("-" * 70)

    registry = DatumRegistry()
    datum = registry.set_datum(lat, lon)
    print(datum.describe())

    relay = FrameRelay(registry)
    measurements = [
        ("At datum", 45.0, -93.0, 10.0),
        ("~100 m north", 45.0009, -93.0, 10.0),
        ("~100 m east", 45.0, -92.99873, 12.0),
    ]

    for i, (name, m_lat, m_lon, m_alt) in enumerate(measurements):
        sample = PoseSample.geodetic(
            stamp=float(i),
            latitude=m_lat,
            longitude=m_lon,
            altitude=m_alt,
            covariance=np.diag([1.0, 1.0, 4.0, 0.01, 0.01, 0.01]),
            frame_name="gps",
        )
        out = relay.relay(sample)
        print(f"\n{name}:")
        print(f"  UTM:   [{out.utm.position[0]:,.2f}, {out.utm.position[1]:,.2f}, "
              f"{out.utm.position[2]:.2f}]")
        print(f"  World: [{out.world.position[0]:.2f}, {out.world.position[1]:.2f}, "
              f"{out.world.position[2]:.2f}]")

        back = world_to_geodetic(datum, *out.world.position)
        print(f"  World -> LLA: {back.latitude:.7f}°, {back.longitude:.7f}°, "
              f"{back.altitude:.2f} m")

    # Example 5: Dropped sample
    print("\n5. Dropping a Bad Measurement")
    print("-" * 70)

    bad = PoseSample.geodetic(stamp=10.0, latitude=np.nan, longitude=-93.0, frame_name="gps")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        outputs = relay.process(bad)
    print(f"Outputs: {len(outputs)}, dropped so far: {relay.n_dropped}")
    for w in caught:
        print(f"  Warning: {w.message}")

    print("\n" + "=" * 70)
    print("Examples completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
