"""Image export utilities for rendered images.

Supported formats:
    - PPM, binary P6 (via Pillow) or ASCII P3, the benchmark's native output
    - PNG (via Pillow)

Rendered buffers are uint8 arrays of shape (H, W, 3) with row 0 at the top,
which is exactly the PPM pixel order.

Example:
    >>> from aobench.image.export import save_ppm
    >>> image = renderer.render()
    >>> save_ppm(image, "ao.ppm")
"""

from __future__ import annotations

import logging
import os
from typing import Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

# Maximum sample value written to PPM headers
PPM_MAXVAL = 255


def _check_rgb_uint8(image: npt.NDArray[np.uint8]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")


def ppm_header(width: int, height: int, *, binary: bool = True) -> bytes:
    """Build a PPM header: magic number, dimensions and maximum value."""
    magic = "P6" if binary else "P3"
    return f"{magic}\n{width} {height}\n{PPM_MAXVAL}\n".encode("ascii")


def save_ppm(
    image: npt.NDArray[np.uint8],
    filepath: PathLike,
    *,
    binary: bool = True,
) -> None:
    """Save an image as a PPM file.

    The binary variant is written by Pillow and has the layout
    ``P6\\n{w} {h}\\n255\\n`` followed by raw RGB bytes, row by row from the
    top. The ASCII variant writes one row of decimal samples per line.

    Args:
        image: uint8 array of shape (H, W, 3).
        filepath: Output file path.
        binary: Write P6 if True, P3 otherwise.

    Raises:
        ValueError: If the image is not an (H, W, 3) uint8 array.
    """
    _check_rgb_uint8(image)
    height, width = image.shape[:2]

    if binary:
        pil_image = PILImage.fromarray(np.ascontiguousarray(image))
        pil_image.save(filepath, format="PPM")
    else:
        with open(filepath, "wb") as f:
            f.write(ppm_header(width, height, binary=False))
            for row in image.reshape(height, width * 3):
                f.write(" ".join(str(int(v)) for v in row).encode("ascii"))
                f.write(b"\n")

    logger.info(f"Wrote {width}x{height} {'P6' if binary else 'P3'} image to {filepath}")


def save_png(image: npt.NDArray[np.uint8], filepath: PathLike) -> None:
    """Save an image as a PNG file.

    Args:
        image: uint8 array of shape (H, W, 3).
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the image is not an (H, W, 3) uint8 array.
    """
    _check_rgb_uint8(image)
    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath, format="PNG")
    logger.info(f"Wrote {image.shape[1]}x{image.shape[0]} PNG image to {filepath}")


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image with values in [0, 1] to uint8.

    Uses the renderer's quantization, min(255, int(clamp(v) * 255)). A
    single-channel (H, W) image is replicated into three channels.

    Args:
        image: Float array of shape (H, W) or (H, W, 3).

    Returns:
        uint8 array of shape (H, W, 3).
    """
    levels = np.minimum(
        (np.clip(image.astype(np.float64), 0.0, 1.0) * 255.0).astype(np.int32), 255
    ).astype(np.uint8)
    if levels.ndim == 2:
        levels = np.repeat(levels[:, :, np.newaxis], 3, axis=2)
    return levels


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
