"""Tests for the Taichi rendering backend.

Taichi is initialized once per session by conftest.py on the CPU backend.

Tests cover:
- Output shape and dtype
- Sky gradient layout (row 0 at the top, blue saturated)
- Depth contract (max_depth = 0 renders black)
- Custom ti.func resolvers
"""

import numpy as np
import pytest
import taichi as ti


def _options(camera, width=16, height=9, **kwargs):
    from src.lenscast.core.integrator import RenderOptions

    return RenderOptions(camera=camera, image_width=width, image_height=height, **kwargs)


class TestTaichiRenderer:
    """Tests for TaichiRenderer.render_image."""

    def test_shape_and_dtype(self, reference_camera):
        """Test the image is (height, width, 3) uint8."""
        from src.lenscast.core.kernels import TaichiRenderer

        image = TaichiRenderer(_options(reference_camera)).render_image()
        assert image.shape == (9, 16, 3)
        assert image.dtype == np.uint8

    def test_pixels_lie_on_gradient(self, reference_camera):
        """Test blue stays saturated and red never exceeds green."""
        from src.lenscast.core.kernels import TaichiRenderer

        image = TaichiRenderer(_options(reference_camera, samples_per_pixel=4)).render_image()
        assert np.all(image[..., 2] >= 254)
        # float32 rounding may cost one step
        assert np.all(image[..., 0].astype(int) <= image[..., 1].astype(int) + 1)

    def test_top_row_is_bluer(self, reference_camera):
        """Test image row 0 shows the top of the viewport."""
        from src.lenscast.core.kernels import TaichiRenderer

        image = TaichiRenderer(_options(reference_camera, height=12)).render_image()
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()

    def test_close_to_python_renderer(self, reference_camera, rng):
        """Test both backends agree on a pinhole camera up to jitter."""
        from src.lenscast.core.integrator import Renderer
        from src.lenscast.core.kernels import TaichiRenderer

        opts = _options(reference_camera, samples_per_pixel=16)
        taichi_image = TaichiRenderer(opts).render_image().astype(int)
        python_image = Renderer(opts).render_image(rng).astype(int)
        # Jitter moves each sample by at most one pixel
        assert np.abs(taichi_image - python_image).max() <= 12

    def test_zero_depth_renders_black(self, reference_camera):
        """Test max_depth = 0 yields an all-black image."""
        from src.lenscast.core.kernels import TaichiRenderer

        image = TaichiRenderer(_options(reference_camera, max_depth=0)).render_image()
        assert not image.any()

    def test_custom_resolver(self, reference_camera):
        """Test a ti.func resolver replaces the sky gradient."""
        import taichi.math as tm

        from src.lenscast.core.kernels import TaichiRenderer

        @ti.func
        def grey(origin: tm.vec3, direction: tm.vec3, depth: ti.i32) -> tm.vec3:
            return tm.vec3(0.25, 0.25, 0.25)

        image = TaichiRenderer(_options(reference_camera), resolver=grey).render_image()
        # sqrt(0.25) * 255.99 = 127.995 -> 127
        assert np.all(image == 127)

    def test_lens_aperture_keeps_gradient(self):
        """Test a wide aperture still renders a valid sky."""
        from src.lenscast.camera.thin_lens import CameraOptions, ThinLensCamera
        from src.lenscast.core.kernels import TaichiRenderer

        camera = ThinLensCamera(CameraOptions(aperture=2.0, focus_distance=3.0))
        image = TaichiRenderer(_options(camera, samples_per_pixel=2)).render_image()
        assert np.all(image[..., 2] >= 254)

    def test_render_writes_file(self, reference_camera, tmp_path):
        """Test render() saves through ImageEncoder."""
        from PIL import Image as PILImage

        from src.lenscast.core.kernels import TaichiRenderer

        output = tmp_path / "taichi.png"
        result = TaichiRenderer(_options(reference_camera, output_path=output)).render()

        assert result == output
        with PILImage.open(output) as img:
            assert img.size == (16, 9)

    def test_render_propagates_encode_error(self, reference_camera, tmp_path):
        """Test save failures surface as EncodeError."""
        from src.lenscast.core.kernels import TaichiRenderer
        from src.lenscast.preview.export import EncodeError

        output = tmp_path / "taichi.unknownformat"
        with pytest.raises(EncodeError):
            TaichiRenderer(_options(reference_camera, output_path=output)).render()
