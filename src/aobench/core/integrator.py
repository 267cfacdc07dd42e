"""Per-pixel shading and the row-band render kernel.

Every pixel is shaded independently:

1. Derive the pixel's random stream from (seed, pixel index).
2. For each cell of a subsamples x subsamples grid inside the pixel, jitter a
   sub-pixel position and trace a primary ray through the camera.
3. A miss contributes the background intensity; a hit contributes the
   ambient occlusion estimated at the hit point.
4. Average, clamp to [0, 1], quantize with min(255, int(value * 255)) and
   write the value to the R, G and B channels.

The kernel renders a band of rows [row_start, row_end) into a NumPy uint8
buffer of shape (height, width, 3) with row 0 at the top. Taichi runs the
outermost loop in parallel; each iteration writes only its own pixel, and
because every pixel owns its random stream the result does not depend on
scheduling, band size, or serial versus parallel execution.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.config import RenderConfig
    >>> from aobench.camera.pinhole import setup_camera
    >>> from aobench.scene.aobench_scene import create_aobench_scene
    >>> from aobench.core.integrator import render_rows
    >>>
    >>> scene, camera = create_aobench_scene()
    >>> setup_camera(camera)
    >>> config = RenderConfig(width=64, height=64)
    >>> pixels = np.zeros((64, 64, 3), dtype=np.uint8)
    >>> render_rows(pixels, 0, 64, config)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from aobench.camera.pinhole import get_pixel_ray
from aobench.config import RenderConfig
from aobench.core.occlusion import T_MAX, T_MIN, ambient_occlusion
from aobench.core.sampler import next_float, seed_stream
from aobench.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def shade_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    subsamples: ti.i32,
    ao_samples: ti.i32,
    seed: ti.u32,
    max_distance: ti.f32,
    falloff: ti.i32,
    background: ti.f32,
) -> ti.f32:
    """Compute the intensity of one pixel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        subsamples: Sub-pixel samples per axis.
        ao_samples: Occlusion samples per axis.
        seed: Base seed of the render.
        max_distance: Occlusion range.
        falloff: An OcclusionFalloff value.
        background: Intensity of rays that miss the scene.

    Returns:
        The averaged intensity, not yet clamped.
    """
    rng = seed_stream(seed, pixel_j * width + pixel_i)
    inv_sub = 1.0 / ti.cast(subsamples, ti.f32)
    total = 0.0

    for k in range(subsamples * subsamples):
        cell_v = k // subsamples
        cell_u = k % subsamples

        r1 = 0.0
        r2 = 0.0
        r1, rng = next_float(rng)
        r2, rng = next_float(rng)
        offset_u = (ti.cast(cell_u, ti.f32) + r1) * inv_sub
        offset_v = (ti.cast(cell_v, ti.f32) + r2) * inv_sub

        ray = get_pixel_ray(pixel_i, pixel_j, offset_u, offset_v, width, height)
        rec = intersect_scene(ray.origin, ray.direction, T_MIN, T_MAX)

        sample = background
        if rec.hit == 1:
            sample, rng = ambient_occlusion(
                rec.point, rec.normal, rng, ao_samples, max_distance, falloff
            )

        total += sample

    return total * inv_sub * inv_sub


@ti.func
def quantize(value: ti.f32) -> ti.i32:
    """Convert an intensity to an 8-bit level: min(255, int(clamp(v) * 255))."""
    return ti.min(ti.cast(tm.clamp(value, 0.0, 1.0) * 255.0, ti.i32), 255)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows_kernel(
    pixels: ti.types.ndarray(dtype=ti.u8, ndim=3),
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    subsamples: ti.i32,
    ao_samples: ti.i32,
    seed: ti.u32,
    max_distance: ti.f32,
    falloff: ti.i32,
    background: ti.f32,
    serial: ti.template(),
):
    ti.loop_config(serialize=serial)
    for j, i in ti.ndrange((row_start, row_end), width):
        value = shade_pixel(
            i, j, width, height, subsamples, ao_samples, seed, max_distance, falloff, background
        )
        level = ti.cast(quantize(value), ti.u8)
        for c in ti.static(range(3)):
            pixels[j, i, c] = level


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    subsamples: ti.i32,
    ao_samples: ti.i32,
    seed: ti.u32,
    max_distance: ti.f32,
    falloff: ti.i32,
    background: ti.f32,
) -> ti.f32:
    return shade_pixel(
        pixel_i,
        pixel_j,
        width,
        height,
        subsamples,
        ao_samples,
        seed,
        max_distance,
        falloff,
        background,
    )


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_buffer(pixels: npt.NDArray[np.uint8], config: RenderConfig) -> None:
    expected = (config.height, config.width, 3)
    if pixels.shape != expected:
        raise ValueError(f"Pixel buffer shape {pixels.shape} does not match {expected}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Pixel buffer must be uint8, got {pixels.dtype}")
    if not pixels.flags["C_CONTIGUOUS"]:
        raise ValueError("Pixel buffer must be C-contiguous")


def render_rows(
    pixels: npt.NDArray[np.uint8],
    row_start: int,
    row_end: int,
    config: RenderConfig,
    *,
    serial: bool = False,
) -> None:
    """Render image rows [row_start, row_end) into a pixel buffer.

    The scene and camera must already be set up. Rows outside the band are
    left untouched.

    Args:
        pixels: Buffer of shape (height, width, 3) and dtype uint8.
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.
        config: Validated render settings.
        serial: Run the kernel on a single thread. The output is identical
            either way.

    Raises:
        ValueError: If the buffer or the row range does not match config.
    """
    _check_buffer(pixels, config)
    if not 0 <= row_start <= row_end <= config.height:
        raise ValueError(
            f"Invalid row range [{row_start}, {row_end}) for height {config.height}"
        )
    if row_start == row_end:
        return

    _render_rows_kernel(
        pixels,
        row_start,
        row_end,
        config.width,
        config.height,
        config.subsamples,
        config.ao_samples,
        config.seed,
        config.max_distance,
        int(config.falloff),
        config.background,
        bool(serial),
    )
    logger.debug(f"Rendered rows {row_start}-{row_end} of {config.height}")


def render_pixel(pixel_i: int, pixel_j: int, config: RenderConfig) -> float:
    """Compute the intensity of a single pixel.

    Uses exactly the same stream and estimator as the full render, so the
    result quantizes to the value the render writes at (pixel_j, pixel_i).
    Intended for testing and debugging.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        config: Validated render settings.

    Returns:
        The pixel intensity before clamping and quantization.

    Raises:
        ValueError: If the pixel lies outside the image.
    """
    if not (0 <= pixel_i < config.width and 0 <= pixel_j < config.height):
        raise ValueError(
            f"Pixel ({pixel_i}, {pixel_j}) outside {config.width}x{config.height} image"
        )

    return float(
        _render_single_pixel(
            pixel_i,
            pixel_j,
            config.width,
            config.height,
            config.subsamples,
            config.ao_samples,
            config.seed,
            config.max_distance,
            int(config.falloff),
            config.background,
        )
    )


def to_level(value: float) -> int:
    """Host equivalent of the kernel's quantization."""
    return min(255, int(min(max(value, 0.0), 1.0) * 255.0))
