"""Taichi implementation of the ambient occlusion rendering benchmark.

This package renders the classic AO benchmark scene (three spheres resting on
a ground plane) by casting primary rays through every pixel and estimating how
exposed each visible surface point is with Monte Carlo hemisphere sampling.

Subpackages:
    core: Vector utilities, random streams, the AO shader and the frame loop
    geometry: Sphere and plane primitives with ray intersection
    scene: Scene storage, nearest-hit queries and the fixed benchmark scenes
    camera: Pinhole camera with primary ray generation
    image: PPM/PNG export of the finished pixel buffer

Modules holding Taichi fields (camera, scene) must be imported after
``ti.init()`` has been called.
"""

__version__ = "0.1.0"
