from __future__ import annotations

import numpy as np
import pytest

from zernike_atlas.colormap import colors_for_bytes
from zernike_atlas.errors import InvalidMode
from zernike_atlas.raster import (
    DETAIL_2D,
    PREVIEW_2D,
    PREVIEW_3D,
    RasterImage,
    profile_with_overrides,
    render_detail_2d,
    render_preview_2d,
    render_preview_3d,
)
from zernike_atlas.raster.canvas import (
    fill_cells,
    fill_ellipse,
    new_canvas,
    stroke_ellipse,
    stroke_polyline,
    to_image,
)


def test_shapes_blend_source_over() -> None:
    canvas = new_canvas(10, 10)
    fill_ellipse(canvas, 5.0, 5.0, 5.0, 5.0, (1.0, 0.0, 0.0, 0.5))
    fill_ellipse(canvas, 5.0, 5.0, 2.0, 2.0, (0.0, 0.0, 1.0, 0.5))
    pixels = to_image(canvas).pixels.astype(int)
    # 0.5 over 0.5 gives alpha 0.75, red 1/3 and blue 2/3 of the colour
    assert abs(pixels[5, 5, 3] - 191) <= 2
    assert abs(pixels[5, 5, 0] - 85) <= 2
    assert abs(pixels[5, 5, 2] - 170) <= 2
    assert abs(pixels[5, 1, 3] - 128) <= 1
    assert pixels[5, 1, 2] == 0
    assert pixels[0, 0, 3] == 0


def test_fill_cells_later_cell_wins() -> None:
    canvas = new_canvas(4, 4)
    colors = np.array([[1.0, 0.0, 0.0, 1.0], [0.0, 0.0, 1.0, 1.0]])
    painted = fill_cells(canvas, np.array([2.0, 3.0]), np.array([2.0, 3.0]), 2.0, colors)
    pixels = to_image(canvas).pixels
    assert painted == 7
    assert pixels[2, 2].tolist() == [0, 0, 255, 255]
    assert pixels[1, 1].tolist() == [255, 0, 0, 255]
    assert pixels[0, 0, 3] == 0


def test_fill_cells_subpixel_cells_hit_their_pixel() -> None:
    canvas = new_canvas(3, 3)
    fill_cells(canvas, np.array([1.2]), np.array([2.7]), 0.3, np.array([[0.0, 1.0, 0.0, 1.0]]))
    pixels = to_image(canvas).pixels
    assert pixels[2, 1].tolist() == [0, 255, 0, 255]
    assert int(pixels[..., 3].astype(int).sum()) == 255


def test_fill_cells_clips_to_canvas() -> None:
    canvas = new_canvas(3, 3)
    painted = fill_cells(canvas, np.array([-5.0, 10.0]), np.array([1.0, 1.0]), 1.0, np.ones((2, 4)))
    assert painted == 0
    assert to_image(canvas).alpha.max() == 0


def test_fill_ellipse_and_polyline() -> None:
    canvas = new_canvas(20, 10)
    fill_ellipse(canvas, 10.0, 5.0, 8.0, 4.0, (0.5, 0.5, 0.5, 1.0))
    filled = to_image(canvas)
    assert filled.alpha[5, 10] == 255
    assert filled.alpha[0, 0] == 0
    line = new_canvas(10, 10)
    stroke_polyline(line, np.array([[1.0, 1.0], [8.0, 1.0], [8.0, 8.0]]), (0.0, 0.0, 0.0, 0.4))
    stroked = to_image(line)
    assert stroked.alpha[1, 4] == 102
    # closing segment runs along the diagonal
    assert stroked.alpha[5, 5] == 102
    assert stroked.alpha[8, 1] == 0


def test_stroke_ellipse_leaves_centre_empty() -> None:
    canvas = new_canvas(21, 21)
    stroke_ellipse(canvas, 10.5, 10.5, 8.0, 8.0, (0.0, 0.0, 0.0, 1.0), line_width=2.0)
    image = to_image(canvas)
    assert image.alpha[10, 10] == 0
    assert image.alpha[9:11, 1:5].max() == 255
    assert image.alpha[10:12, 16:19].max() == 255


def test_polyline_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        stroke_polyline(new_canvas(4, 4), np.zeros((3, 3)), (0.0, 0.0, 0.0, 1.0))
    with pytest.raises(ValueError):
        fill_ellipse(new_canvas(4, 4), 2.0, 2.0, 1.0, 1.0, (0.0, 0.0, 0.0))


def test_raster_image_validation() -> None:
    with pytest.raises(ValueError):
        RasterImage(pixels=np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        RasterImage(pixels=np.zeros((4, 4, 4), dtype=np.float64))
    with pytest.raises(ValueError):
        new_canvas(0, 3)
    image = to_image(new_canvas(5, 3))
    assert (image.height, image.width) == (3, 5)


def test_profile_sizes() -> None:
    assert render_preview_3d(2, 0).pixels.shape == (PREVIEW_3D.height, PREVIEW_3D.width, 4)
    assert render_preview_2d(2, 0).pixels.shape == (PREVIEW_2D.height, PREVIEW_2D.width, 4)
    small = profile_with_overrides(DETAIL_2D, {"width": 100, "height": 100, "radius": 40, "resolution": 60})
    detail = render_detail_2d(2, 0, small, samples=40)
    assert detail.image.pixels.shape == (100, 100, 4)
    assert len(detail.contours) == 5


def test_detail_outside_aperture_is_background() -> None:
    small = profile_with_overrides(DETAIL_2D, {"width": 100, "height": 100, "radius": 40, "resolution": 60})
    image = render_detail_2d(4, 0, small, samples=40).image
    assert image.alpha[0, 0] == 0
    assert image.alpha[99, 99] == 0
    assert image.alpha[50, 50] == 255
    # the aperture background reaches the rim
    assert image.alpha[50, 10] > 0


def test_detail_astigmatism_fourfold_sign_pattern() -> None:
    detail = render_detail_2d(2, 2)
    rgba = detail.image.pixels.astype(int)
    cx = cy = 250
    d = 120
    # cos(2 theta): positive (red side) on the x axis, negative (blue side) on the y axis
    for x, y in ((cx + d, cy), (cx - d, cy)):
        assert rgba[y, x, 0] > rgba[y, x, 2]
    for x, y in ((cx, cy + d), (cx, cy - d)):
        assert rgba[y, x, 2] > rgba[y, x, 0]
    # a quarter turn flips the sign, a half turn keeps it
    right, top = rgba[cy, cx + d], rgba[cy - d, cx]
    left, bottom = rgba[cy, cx - d], rgba[cy + d, cx]
    assert (right[0] > right[2]) == (left[0] > left[2])
    assert (top[0] > top[2]) == (bottom[0] > bottom[2])
    assert (right[0] > right[2]) != (top[0] > top[2])


def test_preview_3d_lifts_piston() -> None:
    image = render_preview_3d(0, 0)
    alpha = image.alpha
    # the disk spans rows 15..45 flat; a unit field lifts it by 7 px
    assert alpha[:7].max() == 0
    assert alpha[40:].max() == 0
    assert alpha[23, 70] > 0


def test_preview_2d_is_elliptical() -> None:
    image = render_preview_2d(2, 0)
    assert image.alpha[15, 70] > 0
    assert image.alpha[15, 5] == 0
    assert image.alpha[15, 135] == 0


def test_preview_2d_sign_pattern_with_canvas_y_down() -> None:
    pixels = render_preview_2d(1, -1).pixels.astype(int)
    # r sin(theta): negative above the centre row, positive below it
    above, below = pixels[5, 70], pixels[25, 70]
    assert above[2] > above[0]
    assert below[0] > below[2]


def test_preview_2d_radius_uses_unsquashed_y() -> None:
    bare = profile_with_overrides(PREVIEW_2D, {"background": None, "outline": None})
    pixel = render_preview_2d(1, -1, bare).pixels[25, 70].astype(int)
    # 10 px below centre on the squashed disk is y = 20 of radius 30, so the
    # field is about 0.7 there rather than the 0.35 a squashed radius gives
    assert pixel[0] >= 250
    assert int(colors_for_bytes(0.8)[1]) <= pixel[1] <= int(colors_for_bytes(0.6)[1])


def test_preview_3d_drops_negative_cells() -> None:
    alpha = render_preview_3d(1, 1).alpha
    left_rows = np.nonzero(alpha[:, 42])[0]
    right_rows = np.nonzero(alpha[:, 98])[0]
    assert left_rows.size and right_rows.size
    # flat centre row is 30; x < 0 is negative and sinks, x > 0 rises
    assert left_rows.mean() > 33.0
    assert right_rows.mean() < 27.0


def test_renders_are_fresh_buffers() -> None:
    first = render_preview_2d(1, 1)
    second = render_preview_2d(1, 1)
    assert first.pixels is not second.pixels
    assert np.array_equal(first.pixels, second.pixels)


def test_invalid_mode_rejected_by_renderers() -> None:
    with pytest.raises(InvalidMode):
        render_preview_3d(2, 1)
    with pytest.raises(InvalidMode):
        render_preview_2d(-1, 0)
    with pytest.raises(InvalidMode):
        render_detail_2d(3, 4)


def test_profile_overrides() -> None:
    bigger = profile_with_overrides(PREVIEW_2D, {"resolution": "50", "outline": "#000000"})
    assert bigger.resolution == 50
    assert bigger.outline == "#000000"
    with pytest.raises(ValueError, match="unknown raster profile keys"):
        profile_with_overrides(PREVIEW_2D, {"colour": "red"})
    with pytest.raises(ValueError):
        profile_with_overrides(PREVIEW_2D, {"compression": 0.0})
