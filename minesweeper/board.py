from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Literal, Tuple

from .errors import InternalConsistencyError, InvalidArgument
from .grid import iter_neighbors
from .rng import shuffle_in_place
from .validation import assert_valid_index, assert_valid_seed, assert_valid_spec

logger = logging.getLogger(__name__)

SafetyMode = Literal["neighbors", "cell"]
NEIGHBORS: SafetyMode = "neighbors"
CELL: SafetyMode = "cell"


@dataclass(frozen=True)
class BoardSpec:
    width: int
    height: int
    mine_count: int

    @property
    def total(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class Board:
    width: int
    height: int
    mine_count: int
    mines: bytes
    adjacent_mine_counts: bytes

    @property
    def total(self) -> int:
        return self.width * self.height

    @property
    def spec(self) -> BoardSpec:
        return BoardSpec(self.width, self.height, self.mine_count)

    def is_mine(self, idx: int) -> bool:
        return self.mines[idx] == 1


def empty_board(width: int, height: int, mine_count: int) -> Board:
    """All-zero placeholder used until the first reveal generates the real board."""
    total = width * height
    return Board(width, height, mine_count, bytes(total), bytes(total))


def compute_adjacent_mine_counts(width: int, height: int, mines: bytes) -> bytes:
    total = width * height
    if len(mines) != total:
        raise InvalidArgument(f"invalid_mines_length: {len(mines)} != {total}")
    counts = bytearray(total)
    for i in range(total):
        if mines[i] == 1:
            continue
        counts[i] = sum(mines[n] for n in iter_neighbors(i, width, height))
    return bytes(counts)


def create_board_from_mine_indices(spec: BoardSpec, mine_indices: Iterable[int]) -> Board:
    assert_valid_spec(spec.width, spec.height, spec.mine_count)
    total = spec.total
    mines = bytearray(total)
    for idx in mine_indices:
        assert_valid_index(idx, total, "mine_index")
        mines[idx] = 1
    actual = sum(mines)
    if actual != spec.mine_count:
        raise InvalidArgument(f"mine_count_mismatch: spec={spec.mine_count}, actual={actual}")
    frozen = bytes(mines)
    return Board(
        spec.width,
        spec.height,
        spec.mine_count,
        frozen,
        compute_adjacent_mine_counts(spec.width, spec.height, frozen),
    )


def safe_zone_indices(width: int, height: int, safe_index: int, mode: SafetyMode) -> List[int]:
    assert_valid_index(safe_index, width * height, "safe_index")
    if mode == CELL:
        return [safe_index]
    if mode != NEIGHBORS:
        raise InvalidArgument(f"invalid_safety_mode: {mode!r}")
    return [safe_index, *iter_neighbors(safe_index, width, height)]


def choose_safety_mode(spec: BoardSpec, safe_index: int) -> SafetyMode:
    zone = safe_zone_indices(spec.width, spec.height, safe_index, NEIGHBORS)
    if spec.mine_count <= spec.total - len(zone):
        return NEIGHBORS
    return CELL


def shuffle_key(seed: str, spec: BoardSpec, safe_index: int, mode: SafetyMode) -> str:
    return f"{seed}|{spec.width}x{spec.height}|{spec.mine_count}|{safe_index}|{mode}"


def _verify_safety(mines: bytes, spec: BoardSpec, safe_index: int, mode: SafetyMode) -> None:
    if mines[safe_index] == 1:
        raise InternalConsistencyError("invariant_violated: safe_index is a mine")
    if mode == NEIGHBORS:
        for n in iter_neighbors(safe_index, spec.width, spec.height):
            if mines[n] == 1:
                raise InternalConsistencyError(
                    f"invariant_violated: neighbor {n} of safe_index {safe_index} is a mine"
                )


def generate_board(spec: BoardSpec, seed: str, safe_index: int) -> Tuple[Board, SafetyMode]:
    """Place ``spec.mine_count`` mines reproducibly, keeping ``safe_index`` clear.

    The whole 3x3 zone around ``safe_index`` is kept clear whenever the
    remaining cells can still hold every mine; otherwise only the clicked
    cell is. The mode actually used is returned next to the board.
    """
    assert_valid_spec(spec.width, spec.height, spec.mine_count)
    assert_valid_seed(seed)
    assert_valid_index(safe_index, spec.total, "safe_index")

    mode = choose_safety_mode(spec, safe_index)
    if mode == CELL:
        logger.debug(
            "neighbor safety infeasible for %dx%d/%d at %d, keeping only the cell clear",
            spec.width, spec.height, spec.mine_count, safe_index,
        )
    excluded = set(safe_zone_indices(spec.width, spec.height, safe_index, mode))
    candidates = [i for i in range(spec.total) if i not in excluded]
    if spec.mine_count > len(candidates):
        raise InternalConsistencyError(
            f"insufficient_space_for_mines: mines={spec.mine_count} candidates={len(candidates)}"
        )

    shuffle_in_place(candidates, shuffle_key(seed, spec, safe_index, mode))

    mines = bytearray(spec.total)
    for idx in candidates[: spec.mine_count]:
        mines[idx] = 1
    frozen = bytes(mines)
    _verify_safety(frozen, spec, safe_index, mode)

    board = Board(
        spec.width,
        spec.height,
        spec.mine_count,
        frozen,
        compute_adjacent_mine_counts(spec.width, spec.height, frozen),
    )
    return board, mode
