"""Image output for rendered frames.

Components:
    export: PPM (P6/P3) and PNG writers, float-to-uint8 conversion, RMSE
"""

from .export import compute_rmse, image_to_uint8, ppm_header, save_png, save_ppm

__all__ = [
    "save_ppm",
    "save_png",
    "ppm_header",
    "image_to_uint8",
    "compute_rmse",
]
