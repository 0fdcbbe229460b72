"""
Particle morph viewer.

Usage:
    python main.py [--config murmur.json] [--resolution 128] [--workers 4] [--profile]
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from murmur.app import MorphApplication
from murmur.config import AppConfig, load_config
from murmur.debug.profiler import profile
from murmur.log import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument("--resolution", type=int, help="override particle grid side")
    parser.add_argument(
        "--workers", type=int, default=None, help="threads for particle evaluation"
    )
    parser.add_argument(
        "--profile", action="store_true", help="write cProfile reports to .debug/"
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = load_config(args.config) if args.config else AppConfig()
    if args.resolution:
        config = replace(
            config, morph=replace(config.morph, resolution=args.resolution)
        ).validate()

    setup_logging(config.logging)
    logging.getLogger(__name__).info("Starting with resolution %d", config.morph.resolution)

    @profile(out_dir=Path(".debug"), enabled=args.profile)
    def morph_viewer() -> None:
        MorphApplication(config, workers=args.workers).run()

    morph_viewer()


if __name__ == "__main__":
    main()
