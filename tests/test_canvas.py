## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math

import pytest

from sixbasic.canvas import Canvas
from sixbasic.errors import BasicIllegalFunctionCall


def _canvas():
    return Canvas(64, 48, tile_width=16, tile_height=12)

def _pixels_of(canvas, color):
    return {(i % canvas.width, i // canvas.width) for i, c in enumerate(canvas.pixels) if c == color}


def test_new_canvas_has_nothing_to_redraw():
    canvas = _canvas()
    assert canvas.dirty == set()
    assert canvas.tiles == (4, 4)


def test_pset_clips_and_marks_one_tile():
    canvas = _canvas()
    canvas.pset(17, 13, 4)
    canvas.pset(-1, 5, 4)
    canvas.pset(64, 0, 4)
    assert canvas.point(17, 13) == 4
    assert canvas.point(-1, 5) == -1
    assert canvas.dirty == {(1, 1)}


def test_color_is_masked_and_defaults_to_foreground():
    canvas = _canvas()
    canvas.pset(0, 0, 20)
    canvas.foreground = 9
    canvas.pset(1, 0)
    assert (canvas.point(0, 0), canvas.point(1, 0)) == (4, 9)


def test_line_reaches_both_ends_and_updates_last_point():
    canvas = _canvas()
    canvas.line(0, 0, 10, 5, 3)
    assert canvas.point(0, 0) == 3 and canvas.point(10, 5) == 3
    assert len(_pixels_of(canvas, 3)) == 11
    assert canvas.last_point == (10, 5)


def test_box_outline_and_filled_box():
    canvas = _canvas()
    canvas.box(2, 2, 6, 5, 1)
    assert len(_pixels_of(canvas, 1)) == 2 * 5 + 2 * 2
    canvas.fill_box(20, 20, 10, 10, 2)
    assert len(_pixels_of(canvas, 2)) == 11 * 11


def test_filled_box_then_paint_fills_exactly_the_rectangle():
    canvas = _canvas()
    canvas.fill_box(10, 10, 20, 20, 4)
    canvas.paint(15, 15, 2)
    assert _pixels_of(canvas, 2) == {(x, y) for x in range(10, 21) for y in range(10, 21)}
    assert _pixels_of(canvas, 4) == set()


def test_paint_up_to_border_stays_inside_box():
    canvas = _canvas()
    canvas.box(10, 10, 20, 20, 4)
    canvas.paint(15, 15, 2, 4)
    assert _pixels_of(canvas, 2) == {(x, y) for x in range(11, 20) for y in range(11, 20)}
    assert canvas.point(0, 0) == 0


def test_paint_no_ops():
    canvas = _canvas()
    canvas.paint(5, 5, 0)
    canvas.paint(-3, 5, 7)
    assert canvas.dirty == set()
    canvas.box(0, 0, 10, 10, 4)
    canvas.dirty.clear()
    canvas.paint(0, 0, 2, 4)
    assert canvas.dirty == set()


def test_paint_fills_whole_canvas_without_border():
    canvas = _canvas()
    canvas.paint(30, 30, 6)
    assert len(_pixels_of(canvas, 6)) == 64 * 48
    assert len(canvas.dirty) == 16


def test_circle_outline_contains_paint():
    canvas = _canvas()
    canvas.circle(32, 24, 10, 4)
    assert canvas.point(42, 24) == 4 and canvas.point(32, 14) == 4
    canvas.paint(32, 24, 2, 4)
    inside = _pixels_of(canvas, 2)
    assert (32, 24) in inside
    assert all(math.dist(p, (32, 24)) < 10.5 for p in inside)
    assert canvas.point(0, 0) == 0


def test_ellipse_from_aspect():
    canvas = _canvas()
    canvas.circle(32, 24, 20, 5, aspect=0.5)
    assert canvas.point(52, 24) == 5 and canvas.point(32, 14) == 5
    assert canvas.point(32, 4) == 0


def test_pie_slice_draws_radius_lines():
    canvas = _canvas()
    canvas.circle(32, 24, 10, 3, start=-0.001, end=-math.pi / 2)
    assert canvas.point(36, 24) == 3
    assert canvas.point(32, 20) == 3
    assert canvas.point(22, 24) == 0


def test_arc_angle_out_of_range():
    with pytest.raises(BasicIllegalFunctionCall):
        _canvas().circle(10, 10, 5, 1, start=0, end=7)


def test_bezier_passes_through_endpoints():
    canvas = _canvas()
    canvas.bezier((2, 40), (30, 0), (60, 40), 7, thickness=3)
    assert canvas.point(2, 40) == 7 and canvas.point(60, 40) == 7
    assert canvas.point(31, 20) == 7
    assert canvas.last_point == (60, 40)


@pytest.mark.parametrize("thickness", [1, 2, 3, 4, 5])
def test_bezier_stroke_is_as_wide_as_requested(thickness):
    canvas = _canvas()
    canvas.bezier((0, 20), (30, 20), (60, 20), 7, thickness=thickness)
    column = [y for y in range(canvas.height) if canvas.point(30, y) == 7]
    assert len(column) == thickness
    assert column == list(range(column[0], column[0] + thickness))


def test_clear_marks_all_tiles():
    canvas = _canvas()
    canvas.background = 1
    canvas.clear()
    assert len(canvas.dirty) == 16
    assert canvas.point(5, 5) == 1


def test_screen_modes():
    canvas = _canvas()
    canvas.set_mode(13, terminal_size=(640, 400))
    assert (canvas.width, canvas.height, canvas.mode) == (320, 200, 13)
    assert len(canvas.dirty) == 20 * 17
    canvas.set_mode(0, terminal_size=(160, 96))
    assert (canvas.width, canvas.height) == (160, 96)
    with pytest.raises(BasicIllegalFunctionCall):
        canvas.set_mode(5, terminal_size=(640, 400))


def test_resize_keeps_overlapping_content():
    canvas = _canvas()
    canvas.pset(3, 3, 9)
    canvas.pset(60, 40, 9)
    canvas.resize(32, 24)
    assert canvas.point(3, 3) == 9
    assert (canvas.width, canvas.height) == (32, 24)
    assert canvas.dirty == {(0, 0), (1, 0), (0, 1), (1, 1)}
