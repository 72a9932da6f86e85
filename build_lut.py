"""
Build the voxel-to-image lookup table for a camera rig and save it as .npz.

Usage:
    python build_lut.py --config configs/lut.yaml --projection rig.npy --output lut.npz

The projection file holds the (N, 3, 4) per-camera projection matrices,
already scaled to the feature map resolution. Either a .npy array or a .npz
archive with a "projection" entry.
"""
import argparse
import logging
import os
from pathlib import Path

import numpy as np

from config import Config
from lut import ProjectionSet, build_lut


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build voxel-to-image lookup table")
    parser.add_argument("--config", type=str, default=None, help="YAML config path")
    parser.add_argument("--projection", type=str, default=None, help="Projection matrices (.npy/.npz)")
    parser.add_argument("--output", type=str, default=None, help="Output .npz path")
    parser.add_argument("--chunk_size", type=int, default=None, help="Voxels per batch")
    parser.add_argument("--log_dir", type=str, default=None, help="Directory for build.log")
    parser.add_argument("--quiet", action="store_true", help="Disable progress bar")
    return parser.parse_args(argv)


def setup_logging(log_dir: str):
    """Setup console and file logging.

    Args:
        log_dir: Directory to store log files
    """
    os.makedirs(log_dir, exist_ok=True)

    handlers = [
        logging.FileHandler(os.path.join(log_dir, "build.log")),
        logging.StreamHandler(),
    ]

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )
    return logging.getLogger(__name__)


def load_projection(path: str) -> ProjectionSet:
    """Load (N, 3, 4) projection matrices from .npy or .npz."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Projection file not found: {path}")

    if path.suffix == ".npz":
        with np.load(path) as data:
            if "projection" not in data:
                raise KeyError(f"{path} has no 'projection' entry (found: {list(data.keys())})")
            matrices = data["projection"]
    else:
        matrices = np.load(path)

    return ProjectionSet(matrices)


def main(argv=None):
    args = parse_args(argv)
    cfg = Config.from_yaml(args.config) if args.config else Config()

    # Override config with CLI args
    if args.projection is not None:
        cfg.projection_file = args.projection
    if args.output is not None:
        cfg.output_file = args.output
    if args.chunk_size is not None:
        cfg.chunk_size = args.chunk_size
    if args.log_dir is not None:
        cfg.log_dir = args.log_dir
    if args.quiet:
        cfg.progress = False

    logger = setup_logging(cfg.log_dir)
    cfg.validate()
    if not cfg.projection_file:
        raise ValueError("No projection file given (--projection or projection_file in config)")

    logger.info("=" * 60)
    logger.info("Building voxel-to-image LUT")
    logger.info("=" * 60)
    logger.info(f"Config: {cfg}")

    cameras = load_projection(cfg.projection_file)
    logger.info(f"Loaded {cameras.n_images} projection matrices from {cfg.projection_file}")

    result = build_lut(
        cfg.n_voxels,
        cfg.voxel_size,
        cfg.origin,
        cameras,
        cameras.n_images,
        cfg.height,
        cfg.width,
        cfg.n_channels,
        chunk_size=cfg.chunk_size,
        progress=cfg.progress,
    )

    stats = result.coverage()
    logger.info(f"Observed voxels: {stats['observed']:,} / {stats['total']:,}")
    for img in range(cameras.n_images):
        logger.info(f"  camera {img}: {stats[f'camera_{img}']:,} voxels")

    saved = result.save(cfg.output_file)
    logger.info(f"Saved LUT to {saved}")
    return result


if __name__ == "__main__":
    main()
