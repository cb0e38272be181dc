"""
Generate a synthetic geodetic track for the frame relay.

This script drives a virtual vehicle around a figure-eight in the world
frame of a datum, converts every truth position to latitude/longitude,
adds GNSS-like noise and writes the measurements in the column layout
consumed by ``scripts/relay_geonav_track.py``.

Files written to the output directory:
    - samples.txt: t, lat, lon, alt, qw, qx, qy, qz, 6 covariance diagonal
    - truth_world.txt: t, x, y, z (world frame, meters)
    - config.json: relay configuration (loadable with load_config)
    - dataset.json: generation parameters

Optionally a fraction of samples is corrupted with NaN positions to
exercise the relay's drop path.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, Tuple

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from geonav.coords import euler_to_quat
from geonav.relay import Datum, GeonavConfig, parse_datum, save_config, world_to_geodetic

PRESETS: Dict[str, Dict[str, float]] = {
    "minneapolis": {"latitude": 45.0, "longitude": -93.0},
    "sydney": {"latitude": -33.8688, "longitude": 151.2093},
    "bergen": {"latitude": 60.3913, "longitude": 5.3221},
}

SAMPLE_COLUMNS = "t lat lon alt qw qx qy qz var_x var_y var_z var_roll var_pitch var_yaw"


def generate_figure_eight(
    radius: float,
    speed: float,
    rate_hz: float,
    duration: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Generate a figure-eight (lemniscate of Gerono) in the world frame.

    Args:
        radius: Half-width of the figure eight (m).
        speed: Approximate vehicle speed (m/s).
        rate_hz: Sample rate (Hz).
        duration: Track duration (s).

    Returns:
        Tuple of (t, xyz, yaw):
            t: timestamps (N,)
            xyz: world positions (N, 3)
            yaw: heading along the track (N,)
    """
    t = np.arange(0.0, duration, 1.0 / rate_hz)
    omega = speed / (2.0 * radius)

    x = radius * np.sin(omega * t)
    y = radius * np.sin(omega * t) * np.cos(omega * t)
    z = 0.5 * np.sin(0.5 * omega * t)

    dx = np.gradient(x, t)
    dy = np.gradient(y, t)
    yaw = np.arctan2(dy, dx)

    return t, np.column_stack([x, y, z]), yaw


def generate_dataset(
    output_dir: str,
    preset: str = "minneapolis",
    radius: float = 50.0,
    speed: float = 2.0,
    rate_hz: float = 5.0,
    duration: float = 120.0,
    altitude: float = 250.0,
    horizontal_std: float = 0.5,
    vertical_std: float = 1.0,
    heading_std: float = np.deg2rad(2.0),
    dropout_rate: float = 0.0,
    seed: int = 42,
) -> None:
    """
    Generate and save a geodetic track dataset.

    Args:
        output_dir: Output directory path.
        preset: Datum location preset.
        radius: Figure-eight half-width (m).
        speed: Vehicle speed (m/s).
        rate_hz: Sample rate (Hz).
        duration: Track duration (s).
        altitude: Mean altitude above the ellipsoid (m).
        horizontal_std: Horizontal position noise (m, 1-sigma).
        vertical_std: Vertical position noise (m, 1-sigma).
        heading_std: Heading noise (rad, 1-sigma).
        dropout_rate: Fraction of samples replaced by NaN positions.
        seed: Random seed.
    """
    rng = np.random.default_rng(seed)
    location = PRESETS[preset]

    print("\n" + "=" * 70)
    print(f"Generating Geonav Track Dataset: {Path(output_dir).name}")
    print("=" * 70)

    datum = Datum.from_geodetic(location["latitude"], location["longitude"])
    print(f"\nStep 1: Datum {location['latitude']:.4f}°, {location['longitude']:.4f}° "
          f"(UTM {datum.utm_zone})")

    print("\nStep 2: Generating figure-eight trajectory (world frame)...")
    t, xyz, yaw = generate_figure_eight(radius, speed, rate_hz, duration)
    xyz[:, 2] += altitude
    print(f"  Samples: {len(t)}")
    print(f"  X range: {xyz[:, 0].min():.1f}m to {xyz[:, 0].max():.1f}m")
    print(f"  Y range: {xyz[:, 1].min():.1f}m to {xyz[:, 1].max():.1f}m")

    print("\nStep 3: Adding measurement noise and converting to geodetic...")
    noise = np.column_stack([
        rng.normal(0.0, horizontal_std, len(t)),
        rng.normal(0.0, horizontal_std, len(t)),
        rng.normal(0.0, vertical_std, len(t)),
    ])
    measured = xyz + noise
    geo = np.array([
        world_to_geodetic(datum, *p).to_array() for p in measured
    ])

    yaw_meas = yaw + rng.normal(0.0, heading_std, len(t))
    quats = np.array([euler_to_quat(0.0, 0.0, psi) for psi in yaw_meas])

    variances = np.tile(
        [horizontal_std**2, horizontal_std**2, vertical_std**2,
         heading_std**2, heading_std**2, heading_std**2],
        (len(t), 1),
    )

    n_dropped = int(round(dropout_rate * len(t)))
    if n_dropped > 0:
        idx = rng.choice(len(t), size=n_dropped, replace=False)
        geo[idx, :] = np.nan
        print(f"  Injected {n_dropped} NaN dropouts")

    print("\nStep 4: Saving dataset...")
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    samples = np.column_stack([t, geo, quats, variances])
    np.savetxt(out / "samples.txt", samples, fmt="%.10f", header=SAMPLE_COLUMNS)
    np.savetxt(
        out / "truth_world.txt",
        np.column_stack([t, xyz]),
        fmt="%.6f",
        header="t x y z (world frame, m)",
    )

    config = GeonavConfig(
        datum=parse_datum([location["latitude"], location["longitude"], 0.0]),
        broadcast_utm_transform=True,
        frequency=rate_hz,
    )
    save_config(config, out / "config.json")

    meta = {
        "dataset": "geonav_track",
        "preset": preset,
        "utm_zone": datum.utm_zone,
        "trajectory": {"radius_m": radius, "speed_mps": speed, "duration_s": duration},
        "noise": {
            "horizontal_std_m": horizontal_std,
            "vertical_std_m": vertical_std,
            "heading_std_rad": heading_std,
        },
        "rate_hz": rate_hz,
        "altitude_m": altitude,
        "dropout_rate": dropout_rate,
        "num_samples": int(len(t)),
        "seed": seed,
    }
    with open(out / "dataset.json", "w") as f:
        json.dump(meta, f, indent=2)

    print(f"\n  Saved dataset to: {out}")
    print("    Files: samples.txt, truth_world.txt, config.json, dataset.json")

    print("\n" + "=" * 70)
    print("Dataset generation complete!")
    print("=" * 70)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate a synthetic geodetic track for the frame relay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Presets:
  minneapolis   45.00°N, 93.00°W (UTM 15T, on the central meridian)
  sydney        33.87°S, 151.21°E (southern hemisphere, UTM 56H)
  bergen        60.39°N, 5.32°E (Norway zone exception, UTM 32V)

Examples:
  python scripts/generate_geonav_track_dataset.py --preset sydney
  python scripts/generate_geonav_track_dataset.py --dropout-rate 0.05 \\
      --output data/sim/geonav_dropouts
        """,
    )
    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS),
        default="minneapolis",
        help="Datum location preset (default: minneapolis)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="data/sim/geonav_track",
        help="Output directory (default: data/sim/geonav_track)",
    )

    traj_group = parser.add_argument_group("Trajectory Parameters")
    traj_group.add_argument("--radius", type=float, default=50.0, help="Figure-eight half-width in m (default: 50)")
    traj_group.add_argument("--speed", type=float, default=2.0, help="Vehicle speed in m/s (default: 2)")
    traj_group.add_argument("--rate", type=float, default=5.0, help="Sample rate in Hz (default: 5)")
    traj_group.add_argument("--duration", type=float, default=120.0, help="Duration in s (default: 120)")

    noise_group = parser.add_argument_group("Noise Parameters")
    noise_group.add_argument("--horizontal-std", type=float, default=0.5, help="Horizontal noise in m (default: 0.5)")
    noise_group.add_argument("--vertical-std", type=float, default=1.0, help="Vertical noise in m (default: 1.0)")
    noise_group.add_argument("--dropout-rate", type=float, default=0.0, help="Fraction of NaN samples (default: 0)")

    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")

    args = parser.parse_args()

    generate_dataset(
        output_dir=args.output,
        preset=args.preset,
        radius=args.radius,
        speed=args.speed,
        rate_hz=args.rate,
        duration=args.duration,
        horizontal_std=args.horizontal_std,
        vertical_std=args.vertical_std,
        dropout_rate=args.dropout_rate,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
