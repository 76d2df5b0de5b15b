## sixbasic — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys


# BASIC palette order is blue-green-red, ANSI is red-green-blue.
ANSI_COLORS = (0, 4, 2, 6, 1, 5, 3, 7)
PRINT_ZONE = 14


def ansi_color(color: int, background: bool = False) -> str:
    color &= 0x0F
    code = ANSI_COLORS[color & 0x07] + (60 if color & 0x08 else 0)
    return f"\033[{code + (40 if background else 30)}m"


class Console:
    """Text cursor and output stream for PRINT, LOCATE, COLOR and CLS; rows and columns are 1-based."""

    def __init__(self, stream=None, columns: int = 80, rows: int = 25, ansi: bool = True):
        self.stream = stream if stream is not None else sys.stdout
        self.columns, self.rows = columns, rows
        self.ansi = ansi
        self.row, self.col = 1, 1
        self.foreground, self.background = 15, 0

    def write(self, text: str) -> None:
        while text:
            room = self.columns - self.col + 1
            chunk, text = text[:room], text[room:]
            self.stream.write(chunk)
            self.col += len(chunk)
            if self.col > self.columns:
                self.newline()

    def newline(self, write: bool = True) -> None:
        if write:
            self.stream.write('\n')
        self.col = 1
        self.row = min(self.row + 1, self.rows)

    def next_zone(self) -> None:
        target = ((self.col - 1) // PRINT_ZONE + 1) * PRINT_ZONE + 1
        if target > self.columns:
            self.newline()
        else:
            self.write(' ' * (target - self.col))

    def tab(self, column: int) -> None:
        column = max(1, min(column, self.columns))
        if column < self.col:
            self.newline()
        self.write(' ' * (column - self.col))

    def locate(self, row: int | None = None, col: int | None = None) -> None:
        self.row = max(1, min(self.rows, self.row if row is None else row))
        self.col = max(1, min(self.columns, self.col if col is None else col))
        if self.ansi:
            self.stream.write(f"\033[{self.row};{self.col}H")

    def cls(self) -> None:
        self.row, self.col = 1, 1
        if self.ansi:
            self.stream.write(ansi_color(self.background, background=True) + "\033[2J\033[H")

    def set_color(self, foreground: int | None = None, background: int | None = None) -> None:
        if foreground is not None: self.foreground = foreground & 0x0F
        if background is not None: self.background = background & 0x0F
        if self.ansi:
            self.stream.write(ansi_color(self.foreground) + ansi_color(self.background, background=True))

    def resize(self, columns: int, rows: int) -> None:
        self.columns, self.rows = columns, rows
        self.row, self.col = min(self.row, rows), min(self.col, columns)

    def bell(self) -> None:
        self.stream.write('\a')

    def reset(self) -> None:
        if self.ansi:
            self.stream.write("\033[0m")

    def flush(self) -> None:
        self.stream.flush()
