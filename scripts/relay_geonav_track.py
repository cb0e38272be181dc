"""
Relay a recorded geodetic track into the UTM and world frames.

Reads a dataset produced by ``generate_geonav_track_dataset.py`` (or any
directory with the same ``samples.txt`` / ``config.json`` layout), runs
every sample through the FrameRelay and writes:

    - utm.txt: t, easting, northing, z, qw, qx, qy, qz, 6 covariance diagonal
    - world.txt: t, x, y, z, qw, qx, qy, qz, 6 covariance diagonal
    - static_transform.json: UTM ← world transform (if broadcast is enabled)
    - world_track.png: world-frame plot (with --plot)

If ``truth_world.txt`` is present, horizontal RMSE against it is reported.
"""

import argparse
import json
import sys
import warnings
from pathlib import Path
from typing import List, Optional

import numpy as np
from tqdm import tqdm

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from geonav.relay import PoseSample, build_relay, load_config

OUTPUT_COLUMNS = "t x y z qw qx qy qz var_x var_y var_z var_roll var_pitch var_yaw"


def load_samples(path: Path) -> List[PoseSample]:
    """
    Load geodetic samples from a whitespace-separated text file.

    Args:
        path: File with columns t, lat, lon, alt, qw, qx, qy, qz and six
              covariance diagonal entries.

    Returns:
        List of GEODETIC-frame PoseSamples.
    """
    data = np.atleast_2d(np.loadtxt(path))
    if data.shape[1] != 14:
        raise ValueError(f"{path} must have 14 columns, got {data.shape[1]}")

    samples = []
    for row in data:
        samples.append(
            PoseSample.geodetic(
                stamp=float(row[0]),
                latitude=row[1],
                longitude=row[2],
                altitude=row[3],
                orientation=row[4:8],
                covariance=np.diag(row[8:14]),
                frame_name="gps",
                child_frame_id="base_link",
            )
        )
    return samples


def samples_to_array(samples: List[PoseSample]) -> np.ndarray:
    """Stack samples into rows of t, position, quaternion, covariance diagonal."""
    if not samples:
        return np.empty((0, 14))
    return np.array([
        np.concatenate([[s.stamp], s.position, s.orientation, np.diag(s.covariance)])
        for s in samples
    ])


def plot_world_track(
    world: np.ndarray,
    truth: Optional[np.ndarray],
    filepath: Path,
) -> None:
    """Save a top-down plot of the relayed world-frame track."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(10, 8))
    if truth is not None:
        ax.plot(truth[:, 1], truth[:, 2], "k-", linewidth=2, label="Ground Truth")
    ax.plot(world[:, 1], world[:, 2], ".", markersize=3, alpha=0.7, label="Relayed (world)")
    ax.plot(0.0, 0.0, "r^", markersize=12, label="Datum")
    ax.set_xlabel("x / East (m)")
    ax.set_ylabel("y / North (m)")
    ax.set_title("Geodetic Track in World Frame")
    ax.axis("equal")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.savefig(filepath, dpi=150, bbox_inches="tight")
    plt.close(fig)


def relay_dataset(data_dir: str, output_dir: Optional[str] = None, plot: bool = False) -> None:
    """
    Relay a dataset directory through the frame relay.

    Args:
        data_dir: Directory with samples.txt and config.json.
        output_dir: Where to write results (default: data_dir).
        plot: Save a world-frame plot.
    """
    data_path = Path(data_dir)
    out = Path(output_dir) if output_dir else data_path
    out.mkdir(parents=True, exist_ok=True)

    print("\n" + "=" * 70)
    print(f"Relaying Geonav Track: {data_path.name}")
    print("=" * 70)

    config = load_config(data_path / "config.json")
    setup = build_relay(config)
    print("\n" + setup.registry.datum.describe())

    samples = load_samples(data_path / "samples.txt")
    print(f"\nLoaded {len(samples)} samples")

    utm_out: List[PoseSample] = []
    world_out: List[PoseSample] = []
    with warnings.catch_warnings():
        # Drops are counted below instead of reported one by one
        warnings.simplefilter("ignore", RuntimeWarning)
        for sample in tqdm(samples, desc="Relaying"):
            outputs = setup.relay.process(sample)
            if outputs:
                utm_sample, world_sample = outputs
                utm_out.append(utm_sample)
                world_out.append(world_sample)

    print(f"\n  Relayed: {setup.relay.n_relayed}")
    print(f"  Dropped: {setup.relay.n_dropped}")
    if setup.relay.last_error is not None:
        print(f"  Last drop reason: {setup.relay.last_error}")

    utm = samples_to_array(utm_out)
    world = samples_to_array(world_out)
    np.savetxt(out / "utm.txt", utm, fmt="%.6f", header=OUTPUT_COLUMNS)
    np.savetxt(out / "world.txt", world, fmt="%.6f", header=OUTPUT_COLUMNS)

    if setup.static_transform is not None:
        static = setup.static_transform
        with open(out / "static_transform.json", "w") as f:
            json.dump(
                {
                    "parent_frame": static.parent_frame.name,
                    "child_frame": static.child_frame.name,
                    "translation": static.transform.translation.tolist(),
                    "rotation_wxyz": static.transform.rotation.tolist(),
                },
                f,
                indent=2,
            )

    truth = None
    truth_file = data_path / "truth_world.txt"
    if truth_file.exists() and len(world) > 0:
        truth = np.atleast_2d(np.loadtxt(truth_file))
        truth_xy = np.column_stack([
            np.interp(world[:, 0], truth[:, 0], truth[:, 1]),
            np.interp(world[:, 0], truth[:, 0], truth[:, 2]),
        ])
        rmse = np.sqrt(np.mean(np.sum((world[:, 1:3] - truth_xy) ** 2, axis=1)))
        print(f"  Horizontal RMSE vs truth: {rmse:.3f} m")

    if plot and len(world) > 0:
        plot_world_track(world, truth, out / "world_track.png")
        print(f"  Saved plot: {out / 'world_track.png'}")

    print(f"\n  Saved results to: {out}")
    print("=" * 70)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Relay a geodetic track into UTM and world frames",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/generate_geonav_track_dataset.py --output data/sim/geonav_track
  python scripts/relay_geonav_track.py --data data/sim/geonav_track --plot
        """,
    )
    parser.add_argument(
        "--data",
        type=str,
        default="data/sim/geonav_track",
        help="Dataset directory (default: data/sim/geonav_track)",
    )
    parser.add_argument("--output", type=str, default=None, help="Output directory (default: --data)")
    parser.add_argument("--plot", action="store_true", help="Save a world-frame plot")

    args = parser.parse_args()
    relay_dataset(args.data, args.output, args.plot)


if __name__ == "__main__":
    main()
