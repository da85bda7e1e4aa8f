"""Tests for the non-interactive CLI commands and display helpers."""

import cv2
import numpy as np
import pytest
from click.testing import CliRunner

from colorreco.cli import main
from colorreco.library.palette import PALETTE
from colorreco.utils.display import (
    blend_with_frame,
    draw_sampling_rect,
    load_frame,
    save_debug_image,
)

RED = (0, 0, 255)
GREEN = (0, 255, 0)


@pytest.fixture
def image_dir(tmp_path):
    """Lossless test images: a red/green scene and one reference per colour."""
    scene = np.zeros((32, 64, 3), dtype=np.uint8)
    scene[:, :32] = RED
    scene[:, 32:] = GREEN
    cv2.imwrite(str(tmp_path / "scene.png"), scene)
    cv2.imwrite(str(tmp_path / "red.png"), np.full((8, 8, 3), RED, dtype=np.uint8))
    cv2.imwrite(str(tmp_path / "green.png"), np.full((8, 8, 3), GREEN, dtype=np.uint8))
    return tmp_path


class TestCompareCommand:
    """Test `colorreco compare`."""

    def test_compare_halves(self, image_dir):
        result = CliRunner().invoke(main, ["compare", str(image_dir / "scene.png")])
        assert result.exit_code == 0
        assert "2.000000" in result.output

    def test_compare_missing_file(self, image_dir):
        result = CliRunner().invoke(main, ["compare", str(image_dir / "missing.png")])
        assert result.exit_code != 0


class TestClassifyCommand:
    """Test `colorreco classify`."""

    def test_classify_writes_raster(self, image_dir):
        output = image_dir / "out" / "reco.png"
        result = CliRunner().invoke(main, [
            "classify", str(image_dir / "scene.png"),
            "--class", str(image_dir / "red.png"),
            "--class", str(image_dir / "green.png"),
            "--output", str(output),
        ])

        assert result.exit_code == 0, result.output
        raster = cv2.imread(str(output))
        assert raster.shape == (32, 64, 3)
        assert (raster[:, :32] == PALETTE[0]).all()
        assert (raster[:, 32:] == PALETTE[1]).all()

    def test_classify_multiple_references_per_class(self, image_dir):
        output = image_dir / "reco.png"
        result = CliRunner().invoke(main, [
            "classify", str(image_dir / "scene.png"),
            "--class", f"{image_dir / 'red.png'},{image_dir / 'green.png'}",
            "--output", str(output),
            "--no-smooth",
        ])

        assert result.exit_code == 0, result.output
        assert (cv2.imread(str(output)) == PALETTE[0]).all()

    def test_classify_missing_reference(self, image_dir):
        result = CliRunner().invoke(main, [
            "classify", str(image_dir / "scene.png"),
            "--class", str(image_dir / "nope.png"),
            "--output", str(image_dir / "reco.png"),
        ])
        assert result.exit_code == 1
        assert not (image_dir / "reco.png").exists()

    def test_classify_requires_class(self, image_dir):
        result = CliRunner().invoke(main, ["classify", str(image_dir / "scene.png")])
        assert result.exit_code != 0


class TestDisplayHelpers:
    """Test blending, drawing and image I/O."""

    def test_blend_full_raster_weight(self):
        raster = np.full((4, 4, 3), RED, dtype=np.uint8)
        frame = np.full((4, 4, 3), 100, dtype=np.uint8)
        np.testing.assert_array_equal(blend_with_frame(raster, frame, 1.0), raster)

    def test_blend_uses_grey_frame(self):
        raster = np.zeros((4, 4, 3), dtype=np.uint8)
        frame = np.full((4, 4, 3), RED, dtype=np.uint8)
        blended = blend_with_frame(raster, frame, 0.0)
        # Grey frame: all three channels equal
        assert (blended[..., 0] == blended[..., 2]).all()
        assert blended[0, 0, 0] > 0

    def test_blend_shape_mismatch(self):
        with pytest.raises(ValueError):
            blend_with_frame(np.zeros((4, 4, 3), np.uint8), np.zeros((4, 5, 3), np.uint8))

    def test_blend_alpha_range(self):
        frame = np.zeros((4, 4, 3), np.uint8)
        with pytest.raises(ValueError):
            blend_with_frame(frame, frame, 1.5)

    def test_draw_sampling_rect_copies(self):
        frame = np.zeros((20, 20, 3), dtype=np.uint8)
        drawn = draw_sampling_rect(frame, (5, 5), (15, 15))
        assert tuple(drawn[5, 10]) == (255, 255, 255)
        assert frame.max() == 0

    def test_save_and_load(self, tmp_path):
        image = np.full((6, 7, 3), GREEN, dtype=np.uint8)
        path = tmp_path / "nested" / "img.png"
        save_debug_image(image, path, "test image")
        np.testing.assert_array_equal(load_frame(path), image)

    def test_save_rejects_float(self, tmp_path):
        with pytest.raises(ValueError):
            save_debug_image(np.zeros((2, 2, 3), np.float32), tmp_path / "f.png")

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_frame(tmp_path / "missing.png")
