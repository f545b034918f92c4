from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
import logging
from typing import Iterable, List, NamedTuple, Optional

from .board import Board, BoardSpec, SafetyMode, empty_board, generate_board
from .grid import in_bounds, iter_neighbors, xy_to_index
from .validation import assert_valid_coords, assert_valid_dimensions, assert_valid_seed

logger = logging.getLogger(__name__)

PLAYING = "playing"
WON = "won"
LOST = "lost"

MINE_HIT_PENALTY = 20


@dataclass(frozen=True)
class GameConfig:
    width: int
    height: int
    mine_count: int
    seed: str

    @property
    def spec(self) -> BoardSpec:
        return BoardSpec(self.width, self.height, self.mine_count)

    @property
    def total(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class GameState:
    config: GameConfig
    status: str
    generated: bool
    first_click_index: Optional[int]
    board: Board
    revealed: bytes
    flagged: bytes
    revealed_count: int
    flags_count: int
    start_ms: Optional[int]
    end_ms: Optional[int]
    score: int = 0
    correct_streak: int = 0


class RevealResult(NamedTuple):
    state: GameState
    safety_mode_used: Optional[SafetyMode] = None


def create_new_game(config: GameConfig) -> GameState:
    # mine count is checked when the board is generated on the first reveal
    assert_valid_seed(config.seed)
    assert_valid_dimensions(config.width, config.height)
    total = config.total
    return GameState(
        config=config,
        status=PLAYING,
        generated=False,
        first_click_index=None,
        board=empty_board(config.width, config.height, config.mine_count),
        revealed=bytes(total),
        flagged=bytes(total),
        revealed_count=0,
        flags_count=0,
        start_ms=None,
        end_ms=None,
    )


def streak_points(streak: int) -> int:
    """Points for a correct action that brings the streak to ``streak``."""
    if streak <= 1:
        return 10
    if streak < 5:
        return 20
    return 30


def _with_start_time(s: GameState, now_ms: Optional[int]) -> GameState:
    if s.start_ms is not None or now_ms is None:
        return s
    return replace(s, start_ms=now_ms)


def _end_time(s: GameState, now_ms: Optional[int]) -> Optional[int]:
    return s.end_ms if s.end_ms is not None else now_ms


def _apply_reveals(s: GameState, start: Iterable[int], now_ms: Optional[int]) -> GameState:
    if s.status != PLAYING:
        return s
    width, height = s.config.width, s.config.height
    total = s.config.total
    board = s.board
    rev = bytearray(s.revealed)
    revealed_count = s.revealed_count

    q = deque(start)
    while q:
        i = q.popleft()
        if i < 0 or i >= total or rev[i] == 1 or s.flagged[i] == 1:
            continue
        if board.mines[i] == 1:
            # every mine is shown once the game is lost
            for j in range(total):
                if board.mines[j] == 1:
                    rev[j] = 1
            return replace(
                s,
                status=LOST,
                revealed=bytes(rev),
                revealed_count=revealed_count,
                end_ms=_end_time(s, now_ms),
                score=s.score - MINE_HIT_PENALTY,
                correct_streak=0,
            )
        rev[i] = 1
        revealed_count += 1
        if board.adjacent_mine_counts[i] == 0:
            for n in iter_neighbors(i, width, height):
                if rev[n] != 1 and s.flagged[n] != 1 and board.mines[n] != 1:
                    q.append(n)

    score, streak = s.score, s.correct_streak
    if revealed_count > s.revealed_count:
        streak += 1
        score += streak_points(streak)
    ns = replace(
        s,
        revealed=bytes(rev),
        revealed_count=revealed_count,
        score=score,
        correct_streak=streak,
    )
    if revealed_count == total - s.config.mine_count:
        ns = replace(ns, status=WON, end_ms=_end_time(ns, now_ms))
    return ns


def reveal_cell(s: GameState, x: int, y: int, now_ms: Optional[int] = None) -> RevealResult:
    assert_valid_coords(x, y)
    if s.status != PLAYING or not in_bounds(x, y, s.config.width, s.config.height):
        return RevealResult(s)
    i = xy_to_index(x, y, s.config.width)
    if s.flagged[i] == 1 or s.revealed[i] == 1:
        return RevealResult(s)

    ns = _with_start_time(s, now_ms)
    mode: Optional[SafetyMode] = None
    if not ns.generated:
        board, mode = generate_board(ns.config.spec, ns.config.seed, i)
        logger.debug("generated %dx%d board with %s safety at %d", board.width, board.height, mode, i)
        ns = replace(ns, board=board, generated=True, first_click_index=i)
    return RevealResult(_apply_reveals(ns, [i], now_ms), mode)


def toggle_flag(s: GameState, x: int, y: int, now_ms: Optional[int] = None) -> GameState:
    assert_valid_coords(x, y)
    if s.status != PLAYING or not in_bounds(x, y, s.config.width, s.config.height):
        return s
    i = xy_to_index(x, y, s.config.width)
    if s.revealed[i] == 1:
        return s
    ns = _with_start_time(s, now_ms)
    flags = bytearray(ns.flagged)
    was = flags[i] == 1
    flags[i] = 0 if was else 1
    return replace(ns, flagged=bytes(flags), flags_count=ns.flags_count + (-1 if was else 1))


def chord(s: GameState, x: int, y: int, now_ms: Optional[int] = None) -> GameState:
    """Reveal the hidden neighbors of a revealed number once enough flags surround it.

    Flags only have to add up to the number; if one of them is misplaced the
    reveal runs into the real mine and the game is lost.
    """
    assert_valid_coords(x, y)
    if s.status != PLAYING or not s.generated:
        return s
    if not in_bounds(x, y, s.config.width, s.config.height):
        return s
    i = xy_to_index(x, y, s.config.width)
    if s.revealed[i] != 1:
        return s

    neighbors = list(iter_neighbors(i, s.config.width, s.config.height))
    flag_count = sum(1 for n in neighbors if s.flagged[n] == 1)
    if flag_count != s.board.adjacent_mine_counts[i]:
        return s

    to_reveal = [n for n in neighbors if s.flagged[n] != 1 and s.revealed[n] != 1]
    return _apply_reveals(_with_start_time(s, now_ms), to_reveal, now_ms)


def to_client_view(s: GameState) -> List[List[str]]:
    """Rows of single-character cells: H hidden, F flagged, M mine, digits for counts."""
    width = s.config.width
    rows: List[List[str]] = []
    for y in range(s.config.height):
        row: List[str] = []
        for x in range(width):
            i = xy_to_index(x, y, width)
            if s.revealed[i] == 1:
                cell = "M" if s.board.mines[i] == 1 else str(s.board.adjacent_mine_counts[i])
            else:
                cell = "F" if s.flagged[i] == 1 else "H"
            row.append(cell)
        rows.append(row)
    return rows
