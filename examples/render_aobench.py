#!/usr/bin/env python3
"""Render the ambient occlusion benchmark scene.

Creates the classic scene (three spheres on a ground plane), renders it band
by band with ambient occlusion shading, and writes the result as PPM or PNG.

Usage:
    python -m examples.render_aobench [options]

Options:
    --width WIDTH            Image width in pixels (default: 256)
    --height HEIGHT          Image height in pixels (default: 256)
    --subsamples N           Sub-pixel samples per axis (default: 2)
    --ao-samples N           Occlusion samples per axis (default: 8)
    --seed SEED              Base random seed (default: 0)
    --max-distance DIST      Occlusion range (default: 1e9)
    --falloff {binary,linear}
                             Occlusion contribution policy (default: binary)
    --threads N              CPU worker threads (default: all cores)
    --arch {cpu,gpu}         Taichi backend (default: cpu)
    --output OUTPUT          Output file path (default: ao.ppm)
    --format {ppm,ppm-ascii,png}
                             Output format (default: ppm)
    --log-level LEVEL        Logging level (default: INFO)

Example:
    python -m examples.render_aobench --width 512 --height 512 --threads 4
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("aobench.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the ambient occlusion benchmark scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=256, help="Image width (default: 256)")
    parser.add_argument("--height", type=int, default=256, help="Image height (default: 256)")
    parser.add_argument(
        "--subsamples",
        type=int,
        default=2,
        help="Sub-pixel samples per axis (default: 2)",
    )
    parser.add_argument(
        "--ao-samples",
        type=int,
        default=8,
        help="Occlusion samples per axis (default: 8)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Base random seed (default: 0)")
    parser.add_argument(
        "--max-distance",
        type=float,
        default=1.0e9,
        help="Occlusion range (default: 1e9)",
    )
    parser.add_argument(
        "--falloff",
        choices=["binary", "linear"],
        default="binary",
        help="Occlusion contribution policy (default: binary)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="CPU worker threads (default: all cores)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="ao.ppm",
        help="Output file path (default: ao.ppm)",
    )
    parser.add_argument(
        "--format",
        choices=["ppm", "ppm-ascii", "png"],
        default="ppm",
        help="Output format (default: ppm)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def render_aobench(args: argparse.Namespace) -> Path:
    """Render the benchmark scene and save it.

    Taichi must already be initialized.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized before fields are created
    from aobench.config import OcclusionFalloff, RenderConfig
    from aobench.core.renderer import AORenderer
    from aobench.image.export import save_png, save_ppm
    from aobench.scene.aobench_scene import create_aobench_scene

    config = RenderConfig(
        width=args.width,
        height=args.height,
        subsamples=args.subsamples,
        ao_samples=args.ao_samples,
        seed=args.seed,
        max_distance=args.max_distance,
        falloff=OcclusionFalloff[args.falloff.upper()],
    )
    config.validate()

    scene, camera = create_aobench_scene(aspect_ratio=config.aspect_ratio)
    renderer = AORenderer(scene, camera, config)

    start_time = time.perf_counter()

    def progress_callback(rows_done: int, total: int) -> None:
        logger.debug(f"Progress: {rows_done}/{total} rows ({100.0 * rows_done / total:.1f}%)")

    image = renderer.render(callback=progress_callback)
    logger.info(f"Rendered in {time.perf_counter() - start_time:.3f}s")

    output_file = Path(args.output)
    if args.format == "png":
        save_png(image, output_file)
    else:
        save_ppm(image, output_file, binary=args.format == "ppm")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_kwargs = {"arch": ti.gpu if args.arch == "gpu" else ti.cpu, "random_seed": args.seed}
    if args.threads is not None:
        if args.threads <= 0:
            logger.error(f"--threads must be positive, got {args.threads}")
            return 1
        init_kwargs["cpu_max_num_threads"] = args.threads
    ti.init(**init_kwargs)

    try:
        output_file = render_aobench(args)
    except Exception as e:
        logger.error(f"Render failed: {e}")
        return 1

    logger.info(f"Saved to: {output_file.absolute()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
