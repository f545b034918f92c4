from __future__ import annotations

from dataclasses import dataclass
import secrets
from typing import Dict, Optional

from .board import BoardSpec
from .errors import InvalidSpec
from .validation import is_int

CUSTOM = "custom"

MIN_WIDTH, MAX_WIDTH = 5, 60
MIN_HEIGHT, MAX_HEIGHT = 5, 40


@dataclass(frozen=True)
class Preset:
    id: str
    label: str
    spec: BoardSpec


PRESETS: Dict[str, Preset] = {
    "beginner": Preset("beginner", "Beginner", BoardSpec(9, 9, 10)),
    "intermediate": Preset("intermediate", "Intermediate", BoardSpec(16, 16, 40)),
    "expert": Preset("expert", "Expert", BoardSpec(30, 16, 99)),
}


def validate_custom_spec(width: int, height: int, mine_count: int) -> BoardSpec:
    if not is_int(width) or not MIN_WIDTH <= width <= MAX_WIDTH:
        raise InvalidSpec(f"invalid_width: must be an integer in [{MIN_WIDTH}, {MAX_WIDTH}]")
    if not is_int(height) or not MIN_HEIGHT <= height <= MAX_HEIGHT:
        raise InvalidSpec(f"invalid_height: must be an integer in [{MIN_HEIGHT}, {MAX_HEIGHT}]")
    total = width * height
    if not is_int(mine_count) or not 1 <= mine_count < total:
        raise InvalidSpec(f"invalid_mine_count: must be an integer in [1, {total - 1}]")
    return BoardSpec(width, height, mine_count)


def resolve_spec(
    difficulty: str = "beginner",
    width: Optional[int] = None,
    height: Optional[int] = None,
    mine_count: Optional[int] = None,
) -> BoardSpec:
    if difficulty == CUSTOM:
        if width is None or height is None or mine_count is None:
            raise InvalidSpec("custom_spec_incomplete: width, height and mine_count are required")
        return validate_custom_spec(width, height, mine_count)
    preset = PRESETS.get(difficulty)
    if preset is None:
        raise InvalidSpec(f"unknown_difficulty: {difficulty!r}")
    return preset.spec


def random_seed() -> str:
    return secrets.token_hex(8)
