"""Camera module for primary ray generation.

Components:
    pinhole: Look-at pinhole (perspective) camera

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across the image
    v in [0, 1]: bottom to top across the image

while pixels are addressed with row 0 at the top.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_pixel_ray,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_pixel_ray",
    "get_camera_origin",
    "get_camera_basis",
    "get_camera_info",
]
