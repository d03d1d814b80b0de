from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

logger = logging.getLogger("render_noise")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Render a grayscale slice of the noise field to PNG.")
    ap.add_argument("--out", default="noise.png", help="output PNG path")
    ap.add_argument("--size", type=int, default=512, help="image width and height in pixels")
    ap.add_argument("--feature-size", type=float, default=12.0, help="pixels per noise unit")
    ap.add_argument("--dim", type=int, choices=(2, 3, 4), default=3)
    ap.add_argument(
        "--seed",
        type=int,
        default=None,
        help="shuffle the table from this seed (default: Perlin's reference permutation)",
    )
    ap.add_argument("--z", type=float, default=0.0, help="fixed z for 3D/4D slices")
    ap.add_argument("--w", type=float, default=0.0, help="fixed w for 4D slices")
    ap.add_argument("--verbose", action="store_true")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root))

    from simplectic import PERLIN_PERMUTATION, noise_map_2d
    from viz.export import array_to_png_bytes

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.size <= 0:
        logger.error("--size must be > 0")
        return 2
    if args.feature_size <= 0.0:
        logger.error("--feature-size must be > 0")
        return 2

    z = noise_map_2d(
        seed=0 if args.seed is None else args.seed,
        table=PERLIN_PERMUTATION if args.seed is None else None,
        dim=args.dim,
        width=args.size,
        height=args.size,
        scale=args.feature_size,
        z=args.z,
        w=args.w,
    )
    logger.info("noise range [%.4f, %.4f]", float(np.min(z)), float(np.max(z)))

    out = Path(args.out)
    out.write_bytes(array_to_png_bytes(z, normalize=False))
    logger.info("wrote %s (%dx%d)", out, args.size, args.size)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
