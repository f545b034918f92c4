from __future__ import annotations

from typing import Any

from .errors import InvalidArgument, InvalidSpec


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def assert_valid_spec(width: Any, height: Any, mine_count: Any) -> None:
    if not is_int(width) or width <= 0:
        raise InvalidSpec(f"invalid_width: {width!r}")
    if not is_int(height) or height <= 0:
        raise InvalidSpec(f"invalid_height: {height!r}")
    total = width * height
    if not is_int(mine_count) or mine_count < 1 or mine_count >= total:
        raise InvalidSpec(f"invalid_mine_count: {mine_count!r} (must be in [1, {total - 1}])")


def assert_valid_dimensions(width: Any, height: Any) -> None:
    if not is_int(width) or width <= 0:
        raise InvalidSpec(f"invalid_width: {width!r}")
    if not is_int(height) or height <= 0:
        raise InvalidSpec(f"invalid_height: {height!r}")


def assert_valid_index(index: Any, total: int, name: str = "index") -> None:
    if not is_int(index) or index < 0 or index >= total:
        raise InvalidArgument(f"invalid_{name}: {index!r} (must be in [0, {total - 1}])")


def assert_valid_coords(x: Any, y: Any) -> None:
    # range is checked by the callers; they treat off-board clicks as no-ops
    if not is_int(x) or not is_int(y):
        raise InvalidArgument(f"invalid_coordinates: ({x!r}, {y!r})")


def assert_valid_seed(seed: Any) -> None:
    if not isinstance(seed, str):
        raise InvalidArgument(f"invalid_seed: seed must be a string, got {type(seed).__name__}")
    try:
        seed.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidArgument(f"invalid_seed: not encodable as UTF-8 ({exc.reason})") from exc
