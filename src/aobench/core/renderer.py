"""Band-by-band frame renderer.

AORenderer owns the pixel buffer of one frame and renders it in bands of
``RenderConfig.row_block`` rows, which supports:
- One-shot rendering with an optional progress callback
- Generator-based rendering that yields after every band
- Safe cancellation: stopping between bands leaves only complete rows
  written, and a later call resumes where the previous one stopped

The scene is frozen for as long as rendering is in progress, and the finished
buffer is only handed out once every row has been written.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aobench.config import RenderConfig
    >>> from aobench.core.renderer import AORenderer
    >>> from aobench.scene.aobench_scene import create_aobench_scene
    >>>
    >>> scene, camera = create_aobench_scene()
    >>> renderer = AORenderer(scene, camera, RenderConfig(width=128, height=128))
    >>> image = renderer.render()
    >>> image.shape
    (128, 128, 3)
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import replace

import numpy as np
import numpy.typing as npt

from aobench.camera.pinhole import PinholeCamera, setup_camera
from aobench.config import RenderConfig
from aobench.core.integrator import render_rows
from aobench.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class AORenderer:
    """Renders the ambient occlusion image of a scene.

    Scene and camera state live in global Taichi fields, so only one scene
    can be rendered at a time. The camera is (re)installed every time
    rendering starts or resumes; its aspect ratio is taken from the image
    size.

    Attributes:
        scene: The scene being rendered.
        camera: The camera, with aspect ratio matching the image.
        config: The validated render settings.
    """

    def __init__(
        self,
        scene: SceneManager,
        camera: PinholeCamera,
        config: RenderConfig | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            scene: The scene to render.
            camera: The camera to render through.
            config: Render settings; defaults to the benchmark settings.

        Raises:
            InvalidConfigurationError: If config fails validation.
        """
        if config is None:
            config = RenderConfig()
        config.validate()

        self.scene = scene
        self.config = config
        self.camera = replace(camera, aspect_ratio=config.aspect_ratio)

        self._pixels = np.zeros((config.height, config.width, 3), dtype=np.uint8)
        self._rows_done = 0
        self._elapsed = 0.0
        self._scene_revision: int | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def rows_done(self) -> int:
        """Number of rows, from the top, that are fully rendered."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        """Whether every row has been rendered."""
        return self._rows_done >= self.config.height

    @property
    def elapsed(self) -> float:
        """Seconds spent inside render kernels so far."""
        return self._elapsed

    @property
    def image(self) -> npt.NDArray[np.uint8]:
        """The finished image, shape (height, width, 3), dtype uint8.

        Raises:
            RuntimeError: If rendering has not completed.
        """
        if not self.is_complete:
            raise RuntimeError(
                f"Render incomplete: {self._rows_done}/{self.config.height} rows done"
            )
        return self._pixels

    def reset(self) -> None:
        """Discard all rendered rows so the next render starts from the top."""
        self._pixels.fill(0)
        self._rows_done = 0
        self._elapsed = 0.0
        self._scene_revision = None

    def render_progressive(
        self,
        serial: bool = False,
    ) -> Generator[tuple[int, int], None, None]:
        """Render band by band, yielding progress after each band.

        Closing the generator (or simply not resuming it) cancels the render
        between bands. Resuming with a new call continues from the first
        unrendered row. If the scene was modified in between, the rows
        already written are discarded and rendering restarts from the top.

        Args:
            serial: Render on a single thread.

        Yields:
            Tuple of (rows_done, total_rows).

        Example:
            >>> for rows_done, total in renderer.render_progressive():
            ...     print(f"{rows_done}/{total} rows")
        """
        config = self.config
        if self._rows_done > 0 and self.scene.revision != self._scene_revision:
            logger.warning("Scene changed since rows were rendered; restarting from the top")
            self.reset()
        if self.is_complete:
            return

        setup_camera(self.camera)
        if self._rows_done == 0:
            logger.info(
                f"Rendering {config.width}x{config.height}, "
                f"{config.total_subsamples} subsamples, "
                f"{config.total_ao_samples} AO samples, seed {config.seed}"
            )
        else:
            logger.info(f"Resuming render at row {self._rows_done}")

        with self.scene.frozen():
            if self._rows_done == 0:
                self._scene_revision = self.scene.revision
            while self._rows_done < config.height:
                row_start = self._rows_done
                row_end = min(row_start + config.row_block, config.height)

                start = time.perf_counter()
                render_rows(self._pixels, row_start, row_end, config, serial=serial)
                self._elapsed += time.perf_counter() - start

                self._rows_done = row_end
                yield (self._rows_done, config.height)

        logger.info(f"Render finished in {self._elapsed:.3f}s")

    def render(
        self,
        callback: ProgressCallback | None = None,
        serial: bool = False,
    ) -> npt.NDArray[np.uint8]:
        """Render the remaining rows and return the finished image.

        Args:
            callback: Optional function called after each band with
                (rows_done, total_rows).
            serial: Render on a single thread.

        Returns:
            The image buffer, shape (height, width, 3), dtype uint8.
        """
        for rows_done, total in self.render_progressive(serial=serial):
            if callback is not None:
                callback(rows_done, total)
        return self.image

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"AORenderer(width={self.width}, height={self.height}, "
            f"rows_done={self._rows_done})"
        )


def render_image(
    config: RenderConfig,
    scene: SceneManager,
    camera: PinholeCamera,
    *,
    serial: bool = False,
) -> npt.NDArray[np.uint8]:
    """Render a complete frame in one call.

    Args:
        config: Render settings.
        scene: The scene to render.
        camera: The camera to render through.
        serial: Render on a single thread.

    Returns:
        The image buffer, shape (height, width, 3), dtype uint8.

    Raises:
        InvalidConfigurationError: If config fails validation.
    """
    return AORenderer(scene, camera, config).render(serial=serial)
