"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable camera with depth of field

Camera responsibilities:
    - Build an orthonormal basis from look-from, look-at and up
    - Size the viewport from vertical FOV, aspect ratio and focus distance
    - Map normalized (s, t) viewport coordinates to world-space rays
    - Jitter ray origins across the lens for depth of field

Ray generation uses normalized viewport coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import CameraOptions, ThinLensCamera

__all__ = [
    "CameraOptions",
    "ThinLensCamera",
]
