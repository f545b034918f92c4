from __future__ import annotations

from typing import Iterator, List, Tuple


def in_bounds(x: int, y: int, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def xy_to_index(x: int, y: int, width: int) -> int:
    return y * width + x


def index_to_x(idx: int, width: int) -> int:
    return idx % width


def index_to_y(idx: int, width: int) -> int:
    return idx // width


def coords(idx: int, width: int) -> Tuple[int, int]:
    y, x = divmod(idx, width)
    return x, y


def iter_neighbors(idx: int, width: int, height: int) -> Iterator[int]:
    """Yield the in-bounds cells at Chebyshev distance 1, row by row."""
    x0, y0 = coords(idx, width)
    for y in range(max(0, y0 - 1), min(height, y0 + 2)):
        for x in range(max(0, x0 - 1), min(width, x0 + 2)):
            if x == x0 and y == y0:
                continue
            yield xy_to_index(x, y, width)


def neighbor_indices(idx: int, width: int, height: int) -> List[int]:
    return list(iter_neighbors(idx, width, height))
