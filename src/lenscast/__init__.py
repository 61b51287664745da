"""Camera ray casting with stochastic super-sampling.

This package renders images by casting thin-lens camera rays through a
virtual viewport and averaging jittered samples per pixel, with support for:
- Depth of field (finite aperture, focus distance)
- Anti-aliasing by jittered super-sampling
- Gamma 2 correction and 8-bit export
- Pluggable colour resolvers (a sky gradient is built in)
- Serial, row-parallel and Taichi kernel backends

Subpackages:
    core: Vector/colour algebra, random sampling, rays, and the render loop
    camera: Camera model with ray generation
    preview: Image export and preview utilities
"""

__version__ = "0.1.0"
