"""Render configuration for the ambient occlusion benchmark.

The defaults reproduce the original benchmark: a 256x256 image, a 2x2 grid of
sub-pixel samples and an 8x8 set of occlusion rays per hit. Sample counts are
given per axis, so ``subsamples=2`` traces four primary rays per pixel and
``ao_samples=8`` casts sixty-four occlusion rays per hit.

Example:
    >>> from aobench.config import RenderConfig, OcclusionFalloff
    >>> config = RenderConfig(width=64, height=64, seed=7)
    >>> config.validate()
    >>> config.total_subsamples
    4
    >>> RenderConfig(width=0).validate()
    Traceback (most recent call last):
        ...
    aobench.errors.InvalidConfigurationError: width must be positive, got 0
"""

import math
from dataclasses import dataclass
from enum import IntEnum

from aobench.errors import InvalidConfigurationError

# Benchmark defaults
DEFAULT_WIDTH = 256
DEFAULT_HEIGHT = 256
DEFAULT_SUBSAMPLES = 2
DEFAULT_AO_SAMPLES = 8

# Occlusion rays reach this far unless told otherwise (effectively unbounded)
DEFAULT_MAX_DISTANCE = 1.0e9

# Seeds are consumed as unsigned 32-bit integers by the random streams
MAX_SEED = 2**32 - 1

# Pixel indices (row * width + column) are 32-bit signed integers in kernels
MAX_PIXELS = 2**31 - 1


class OcclusionFalloff(IntEnum):
    """How an occlusion ray that hits geometry contributes to the estimate.

    BINARY: any hit within range fully occludes (contributes 0).
    LINEAR: a hit at distance t contributes t / max_distance, so near
        occluders darken more than far ones.
    """

    BINARY = 0
    LINEAR = 1


@dataclass(frozen=True)
class RenderConfig:
    """Settings for a single render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        subsamples: Sub-pixel samples per axis (antialiasing).
        ao_samples: Occlusion samples per axis of the hemisphere grid.
        seed: Base seed; every pixel derives its own stream from it.
        max_distance: Occlusion rays ignore hits farther than this.
        falloff: Contribution policy for occlusion hits.
        background: Intensity in [0, 1] written for rays that miss everything.
        row_block: Number of image rows rendered per kernel launch.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    subsamples: int = DEFAULT_SUBSAMPLES
    ao_samples: int = DEFAULT_AO_SAMPLES
    seed: int = 0
    max_distance: float = DEFAULT_MAX_DISTANCE
    falloff: OcclusionFalloff = OcclusionFalloff.BINARY
    background: float = 0.0
    row_block: int = 16

    @property
    def total_subsamples(self) -> int:
        """Primary rays traced per pixel."""
        return self.subsamples * self.subsamples

    @property
    def total_ao_samples(self) -> int:
        """Occlusion rays cast per surface hit."""
        return self.ao_samples * self.ao_samples

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check every setting before any rendering work starts.

        Raises:
            InvalidConfigurationError: On the first failed check, naming it.
        """
        for name in ("width", "height", "subsamples", "ao_samples", "row_block"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigurationError(
                    f"{name} must be an integer, got {type(value).__name__}"
                )
            if value <= 0:
                raise InvalidConfigurationError(f"{name} must be positive, got {value}")

        if self.width * self.height > MAX_PIXELS:
            raise InvalidConfigurationError(
                f"width * height must not exceed {MAX_PIXELS}, got {self.width * self.height}"
            )

        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise InvalidConfigurationError(
                f"seed must be an integer, got {type(self.seed).__name__}"
            )
        if not 0 <= self.seed <= MAX_SEED:
            raise InvalidConfigurationError(
                f"seed must be in [0, {MAX_SEED}], got {self.seed}"
            )

        if not math.isfinite(self.max_distance) or self.max_distance <= 0.0:
            raise InvalidConfigurationError(
                f"max_distance must be positive and finite, got {self.max_distance}"
            )

        if not 0.0 <= self.background <= 1.0:
            raise InvalidConfigurationError(
                f"background must be in [0, 1], got {self.background}"
            )

        try:
            OcclusionFalloff(self.falloff)
        except ValueError:
            raise InvalidConfigurationError(f"Unknown falloff: {self.falloff!r}") from None
