## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math
import functools

from .errors import BasicIllegalFunctionCall


# Standard 16-colour CGA/EGA palette as (r, g, b) in 0..255.
PALETTE_16 = (
    (0, 0, 0), (0, 0, 170), (0, 170, 0), (0, 170, 170),
    (170, 0, 0), (170, 0, 170), (170, 85, 0), (170, 170, 170),
    (85, 85, 85), (85, 85, 255), (85, 255, 85), (85, 255, 255),
    (255, 85, 85), (255, 85, 255), (255, 255, 85), (255, 255, 255),
)

# Mode 0 has no fixed size, it follows the terminal surface.
SCREEN_MODES = {
    1: (320, 200), 2: (640, 200), 7: (320, 200), 8: (640, 200),
    9: (640, 350), 11: (640, 480), 12: (640, 480), 13: (320, 200),
}

TWO_PI = 2 * math.pi


@functools.cache
def _brush(thickness: int) -> tuple:
    """Round pen exactly `thickness` pixels across; even widths lean up and left of the path."""
    span, centre = range(-(thickness // 2), thickness - thickness // 2), (thickness - 1) - 2 * (thickness // 2)
    limit = (thickness - 1) ** 2 + 2 * (thickness - 1) + 2
    return tuple((dx, dy) for dy in span for dx in span if (2 * dx - centre) ** 2 + (2 * dy - centre) ** 2 <= limit)


class Canvas:
    """Indexed-colour pixel buffer that records which tiles were drawn on since the last flush."""

    def __init__(self, width: int = 640, height: int = 480, tile_width: int = 64, tile_height: int = 48):
        self.width, self.height = width, height
        self.tile_width, self.tile_height = tile_width, tile_height
        self.foreground, self.background = 15, 0
        self.pixels = bytearray(width * height)
        self.last_point = (width // 2, height // 2)
        self.dirty: set[tuple[int, int]] = set()
        self.mode = 0

    @property
    def tiles(self) -> tuple[int, int]:
        return -(-self.width // self.tile_width), -(-self.height // self.tile_height)

    def _color(self, color) -> int:
        return (self.foreground if color is None else int(color)) & 0x0F

    # Pixels ──────────────────────────────────────────────────────────────────────────────────
    def put(self, x: int, y: int, color: int) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[y * self.width + x] = color
            self.dirty.add((x // self.tile_width, y // self.tile_height))

    def hline(self, x0: int, x1: int, y: int, color: int) -> None:
        x0, x1 = max(0, min(x0, x1)), min(self.width - 1, max(x0, x1))
        if not 0 <= y < self.height or x0 > x1: return
        row = y * self.width
        self.pixels[row + x0:row + x1 + 1] = bytes([color]) * (x1 - x0 + 1)
        ty = y // self.tile_height
        self.dirty.update((tx, ty) for tx in range(x0 // self.tile_width, x1 // self.tile_width + 1))

    def point(self, x: int, y: int) -> int:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.pixels[y * self.width + x]
        return -1

    def pset(self, x: int, y: int, color=None) -> None:
        self.put(x, y, self._color(color))
        self.last_point = (x, y)

    # Lines & boxes ───────────────────────────────────────────────────────────────────────────
    def _line(self, x0: int, y0: int, x1: int, y1: int, color: int, brush: tuple = ((0, 0),)) -> None:
        dx, dy = abs(x1 - x0), -abs(y1 - y0)
        sx, sy = (1 if x0 < x1 else -1), (1 if y0 < y1 else -1)
        err = dx + dy
        while True:
            for bx, by in brush:
                self.put(x0 + bx, y0 + by, color)
            if x0 == x1 and y0 == y1: break
            e2 = 2 * err
            if e2 >= dy:
                err += dy; x0 += sx
            if e2 <= dx:
                err += dx; y0 += sy

    def line(self, x0: int, y0: int, x1: int, y1: int, color=None) -> None:
        self._line(x0, y0, x1, y1, self._color(color))
        self.last_point = (x1, y1)

    def box(self, x0: int, y0: int, x1: int, y1: int, color=None) -> None:
        c = self._color(color)
        self.hline(x0, x1, y0, c)
        self.hline(x0, x1, y1, c)
        self._line(x0, y0, x0, y1, c)
        self._line(x1, y0, x1, y1, c)
        self.last_point = (x1, y1)

    def fill_box(self, x0: int, y0: int, x1: int, y1: int, color=None) -> None:
        c = self._color(color)
        for y in range(max(0, min(y0, y1)), min(self.height - 1, max(y0, y1)) + 1):
            self.hline(x0, x1, y, c)
        self.last_point = (x1, y1)

    # Circles, ellipses and arcs ──────────────────────────────────────────────────────────────
    def circle(self, cx: int, cy: int, r: int, color=None, start=None, end=None, aspect=None) -> None:
        c, r = self._color(color), abs(int(r))
        if aspect is None or aspect == 1:
            rx = ry = r
        elif aspect > 1:
            rx, ry = round(r / aspect), r
        else:
            rx, ry = r, round(r * aspect)
        if start is None and end is None:
            if rx == ry:
                self._midpoint_circle(cx, cy, r, c)
            else:
                self._midpoint_ellipse(cx, cy, rx, ry, c)
        else:
            self._arc(cx, cy, rx, ry, c, start, end)
        self.last_point = (cx, cy)

    def _midpoint_circle(self, cx: int, cy: int, r: int, c: int) -> None:
        x, y = r, 0
        err = 1 - r
        while x >= y:
            for px, py in ((x, y), (y, x), (-y, x), (-x, y), (-x, -y), (-y, -x), (y, -x), (x, -y)):
                self.put(cx + px, cy + py, c)
            y += 1
            if err < 0:
                err += 2 * y + 1
            else:
                x -= 1
                err += 2 * (y - x + 1)

    def _midpoint_ellipse(self, cx: int, cy: int, rx: int, ry: int, c: int) -> None:
        # see http://members.chello.at/~easyfilter/bresenham.html
        dx, dy = 16 * (1 - 2 * rx) * ry * ry, 16 * rx * rx
        ddx, ddy = 32 * ry * ry, 32 * rx * rx
        err = dx + dy
        x, y = rx, 0
        while x >= 0:
            for px, py in ((x, y), (-x, y), (-x, -y), (x, -y)):
                self.put(cx + px, cy + py, c)
            e2 = 2 * err
            if e2 <= dy:
                y += 1; dy += ddy; err += dy
            if e2 >= dx or e2 > dy:
                x -= 1; dx += ddx; err += dx
        # finish the tips of flat, tall ellipses
        while y < ry:
            y += 1
            self.put(cx, cy + y, c)
            self.put(cx, cy - y, c)

    def _arc(self, cx: int, cy: int, rx: int, ry: int, c: int, start, end) -> None:
        """Arc sampled by angle and joined with lines; negative angles also draw the radius."""
        for angle in (start, end):
            if angle is not None and abs(angle) > TWO_PI + 1e-6:
                raise BasicIllegalFunctionCall(f"Illegal function call: arc angle {angle} beyond 2π.")
        a0 = abs(start) if start is not None else 0.0
        a1 = abs(end) if end is not None else TWO_PI
        if a1 <= a0:
            a1 += TWO_PI

        def at(angle):
            return cx + round(rx * math.cos(angle)), cy - round(ry * math.sin(angle))

        steps = max(8, math.ceil((a1 - a0) * max(rx, ry, 1)))
        previous = at(a0)
        for i in range(1, steps + 1):
            current = at(a0 + (a1 - a0) * i / steps)
            self._line(*previous, *current, c)
            previous = current
        if start is not None and start < 0:
            self._line(cx, cy, *at(a0), c)
        if end is not None and end < 0:
            self._line(cx, cy, *at(a1), c)

    # Flood fill ──────────────────────────────────────────────────────────────────────────────
    def paint(self, x: int, y: int, color=None, border=None) -> None:
        """4-connected scanline fill of the seed's region, or of everything up to `border`."""
        c = self._color(color)
        if (seed := self.point(x, y)) < 0:
            return
        if border is None:
            if seed == c: return
            def inside(pixel): return pixel == seed
        else:
            b = int(border) & 0x0F
            if seed in (b, c): return
            def inside(pixel): return pixel != b and pixel != c

        w, pixels = self.width, self.pixels
        stack = [(x, y)]
        while stack:
            sx, sy = stack.pop()
            row = sy * w
            if not inside(pixels[row + sx]): continue
            left, right = sx, sx
            while left > 0 and inside(pixels[row + left - 1]): left -= 1
            while right < w - 1 and inside(pixels[row + right + 1]): right += 1
            self.hline(left, right, sy, c)
            for ny in (sy - 1, sy + 1):
                if not 0 <= ny < self.height: continue
                above, in_span = ny * w, False
                for nx in range(left, right + 1):
                    if inside(pixels[above + nx]):
                        if not in_span: stack.append((nx, ny))
                        in_span = True
                    else:
                        in_span = False
        self.last_point = (x, y)

    # Curves ──────────────────────────────────────────────────────────────────────────────────
    def bezier(self, p0: tuple, p1: tuple, p2: tuple, color=None, thickness: int = 1) -> None:
        """Quadratic curve flattened into a polyline, stroked with a round brush."""
        c = self._color(color)
        length = math.dist(p0, p1) + math.dist(p1, p2)
        segments = max(2, math.ceil(length / 2))
        brush = _brush(max(1, int(thickness)))

        def at(t):
            u = 1 - t
            return (round(u * u * p0[0] + 2 * u * t * p1[0] + t * t * p2[0]),
                    round(u * u * p0[1] + 2 * u * t * p1[1] + t * t * p2[1]))

        previous = at(0.0)
        for i in range(1, segments + 1):
            current = at(i / segments)
            self._line(*previous, *current, c, brush)
            previous = current
        self.last_point = tuple(p2)

    # Surface ─────────────────────────────────────────────────────────────────────────────────
    def mark_all(self) -> None:
        tiles_x, tiles_y = self.tiles
        self.dirty.update((tx, ty) for ty in range(tiles_y) for tx in range(tiles_x))

    def clear(self) -> None:
        self.pixels[:] = bytes([self.background]) * len(self.pixels)
        self.last_point = (self.width // 2, self.height // 2)
        self.mark_all()

    def resize(self, width: int, height: int) -> None:
        """Change the pixel size, keeping the overlapping top-left content."""
        if (width, height) == (self.width, self.height): return
        old, old_width = self.pixels, self.width
        self.pixels = bytearray([self.background]) * (width * height)
        keep = min(width, old_width)
        for y in range(min(height, self.height)):
            self.pixels[y * width:y * width + keep] = old[y * old_width:y * old_width + keep]
        self.width, self.height = width, height
        self.dirty.clear()
        self.mark_all()
        self.last_point = (width // 2, height // 2)

    def set_mode(self, mode: int, terminal_size: tuple[int, int]) -> None:
        if mode == 0:
            width, height = terminal_size
        elif mode in SCREEN_MODES:
            width, height = SCREEN_MODES[mode]
        else:
            raise BasicIllegalFunctionCall(f"Illegal function call: SCREEN {mode}.")
        self.mode = mode
        self.width, self.height = width, height
        self.pixels = bytearray(width * height)
        self.dirty.clear()
        self.clear()
