"""Command line lookup of a transform between two seeded frames."""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from .config import FusionSettings, SeedConfig
from .errors import MalformedConfigError
from .fusion import TransformFusion
from .utils.conversions import wxyz_to_xyzw

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Look up a transform in a seeded frame graph")

    parser.add_argument(
        "--config", type=str, required=True, help="Path to the YAML seed document"
    )
    parser.add_argument(
        "--source", type=str, required=True, help="Frame to express the result in"
    )
    parser.add_argument("--target", type=str, required=True, help="Frame to locate")

    # Overrides of the document's fusion settings
    parser.add_argument("--alpha", type=float, default=None, help="Smoothing factor in (0, 1]")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Staleness timeout in seconds, 0 disables expiry",
    )
    parser.add_argument(
        "--default-weight",
        type=float,
        default=None,
        help="Edge weight for measurements that omit one",
    )

    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the lookup and print the path, translation and rotation (x, y, z, w)."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SeedConfig.from_file(args.config)
        overrides = {
            "alpha": args.alpha,
            "timeout": args.timeout,
            "default_weight": args.default_weight,
        }
        settings = {
            "alpha": config.fusion.alpha,
            "timeout": config.fusion.timeout,
            "default_weight": config.fusion.default_weight,
        }
        settings.update({key: value for key, value in overrides.items() if value is not None})
        config.fusion = FusionSettings(**settings)
    except (MalformedConfigError, FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    fusion = TransformFusion.from_config(config)
    result = fusion.lookup(args.source, args.target)
    if not result.found:
        logger.error("No transform from %s to %s", args.source, args.target)
        return 1

    pose = result.pose()
    np.set_printoptions(precision=6, suppress=True)
    print(f"path:        {' -> '.join(result.path)}")
    print(f"translation: {pose.position}")
    print(f"rotation:    {wxyz_to_xyzw(pose.orientation)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
