## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import math
import sys
import logging
from dataclasses import dataclass

from .canvas import Canvas, PALETTE_16


log = logging.getLogger(__name__)

# Six vertical pixels become one character: bit 0 is the top row, offset by 63.
_SIXEL_CHARS = bytes((v + 63) & 0xFF for v in range(256))
_RUNS = re.compile(r'(.)\1{3,}')


def default_tile(cell: tuple[int, int]) -> tuple[int, int]:
    """Tile size that starts on a character cell and holds whole sixel bands."""
    cell_width, cell_height = cell
    return cell_width * 8, cell_height * 3 if (cell_height * 3) % 6 == 0 else cell_height * 6

def check_tile(tile: tuple[int, int], cell: tuple[int, int]) -> tuple[int, int]:
    """Tiles are placed by character cell, so both sides must span whole cells and the height whole bands."""
    (width, height), (cell_width, cell_height) = tile, cell
    band = math.lcm(6, cell_height)
    if width <= 0 or height <= 0 or width % cell_width or height % band:
        raise ValueError(f"Tile {width}x{height} must be a multiple of {cell_width}x{band} pixels.")
    return width, height


class SixelEncoder:
    def __init__(self, palette=PALETTE_16):
        self.palette = palette
        self.registers = ''.join(f"#{i};2;{r * 100 // 255};{g * 100 // 255};{b * 100 // 255}"
                                 for i, (r, g, b) in enumerate(palette))

    def encode(self, pixels: bytes, stride: int, x: int, y: int, width: int, height: int) -> str:
        """Encode the `width` x `height` region at (x, y) of a row-major pixel buffer."""
        out = [f'\033P0;1;q"1;1;{width};{height}', self.registers]
        for top in range(y, y + height, 6):
            rows = [pixels[(top + i) * stride + x:(top + i) * stride + x + width] for i in range(min(6, y + height - top))]
            columns: dict[int, bytearray] = {}
            for bit, row in enumerate(rows):
                for i, color in enumerate(row):
                    if (codes := columns.get(color)) is None:
                        codes = columns[color] = bytearray(width)
                    codes[i] |= 1 << bit
            for color in sorted(columns):
                out.append(f"#{color}{self.compress(bytes(columns[color]).translate(_SIXEL_CHARS).decode('ascii'))}$")
            out.append('-')
        out.append('\033\\')
        return ''.join(out)

    @staticmethod
    def compress(data: str) -> str:
        return _RUNS.sub(lambda m: f"!{len(m.group(0))}{m.group(1)}", data)


@dataclass(frozen=True)
class TileUpdate:
    tile: tuple[int, int]
    x: int
    y: int
    width: int
    height: int
    row: int
    col: int
    data: str


class DifferentialRenderer:
    """Writes only the canvas tiles drawn on since the previous flush, each positioned at its cell."""

    def __init__(self, canvas: Canvas, stream=None, cell: tuple[int, int] = (8, 16), enabled: bool = True):
        self.canvas = canvas
        self.stream = stream if stream is not None else sys.stdout
        check_tile((canvas.tile_width, canvas.tile_height), cell)
        self.cell_width, self.cell_height = cell
        self.enabled = enabled
        self.encoder = SixelEncoder()
        self.stats = {'flushes': 0, 'tiles': 0, 'bytes': 0}

    def flush(self) -> list[TileUpdate]:
        canvas = self.canvas
        dirty = sorted(canvas.dirty, key=lambda t: (t[1], t[0]))
        canvas.dirty.clear()
        self.stats['flushes'] += 1

        updates = []
        for tx, ty in dirty:
            x, y = tx * canvas.tile_width, ty * canvas.tile_height
            width, height = min(canvas.tile_width, canvas.width - x), min(canvas.tile_height, canvas.height - y)
            if width <= 0 or height <= 0: continue
            data = self.encoder.encode(canvas.pixels, canvas.width, x, y, width, height)
            updates.append(TileUpdate((tx, ty), x, y, width, height,
                                      row=1 + y // self.cell_height, col=1 + x // self.cell_width, data=data))

        if updates and self.enabled:
            payload = ''.join(f"\0337\033[{u.row};{u.col}H{u.data}\0338" for u in updates)
            self.stream.write(payload)
            self.stream.flush()
            self.stats['bytes'] += len(payload)
        self.stats['tiles'] += len(updates)
        if updates:
            log.debug("Flushed %d tile(s) of %d.", len(updates), canvas.tiles[0] * canvas.tiles[1])
        return updates
