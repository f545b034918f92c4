from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, Optional

from .board import SafetyMode
from .game_engine import (
    PLAYING,
    GameConfig,
    GameState,
    create_new_game,
    reveal_cell as engine_reveal,
    toggle_flag as engine_flag,
    chord as engine_chord,
    to_client_view,
)
from .presets import random_seed, resolve_spec

logger = logging.getLogger(__name__)

ABANDONED = "abandoned"


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass(frozen=True)
class GameSession:
    state: GameState
    difficulty: str
    created_ms: int
    safety_mode: Optional[SafetyMode] = None
    abandoned: bool = False

    @property
    def status(self) -> str:
        return ABANDONED if self.abandoned else self.state.status

    @property
    def active(self) -> bool:
        return not self.abandoned and self.state.status == PLAYING


class InMemoryPersistence:
    """One current game per player, kept in process memory."""

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self.clock = clock or _now_ms
        self.games: Dict[str, GameSession] = {}

    def get_game(self, user_id: str) -> Optional[GameSession]:
        return self.games.get(user_id)

    def _require(self, user_id: str) -> GameSession:
        session = self.games.get(user_id)
        if session is None:
            raise KeyError("game_not_found")
        return session

    def start_game(
        self,
        user_id: str,
        difficulty: str = "beginner",
        width: Optional[int] = None,
        height: Optional[int] = None,
        mine_count: Optional[int] = None,
        seed: Optional[str] = None,
    ) -> GameSession:
        existing = self.games.get(user_id)
        if existing and existing.active:
            raise ValueError("active_game_exists")
        spec = resolve_spec(difficulty, width, height, mine_count)
        config = GameConfig(spec.width, spec.height, spec.mine_count, seed if seed is not None else random_seed())
        session = GameSession(state=create_new_game(config), difficulty=difficulty, created_ms=self.clock())
        self.games[user_id] = session
        logger.debug("started %s game for %s seed=%s", difficulty, user_id, config.seed)
        return session

    def _store(self, user_id: str, before: GameSession, after: GameSession) -> GameSession:
        self.games[user_id] = after
        if before.state.status == PLAYING and after.state.status != PLAYING:
            logger.info(
                "game for %s finished status=%s score=%d revealed=%d",
                user_id, after.state.status, after.state.score, after.state.revealed_count,
            )
        return after

    def reveal(self, user_id: str, x: int, y: int) -> GameSession:
        session = self._require(user_id)
        if session.abandoned:
            return session
        state, mode = engine_reveal(session.state, x, y, self.clock())
        if state is session.state:
            return session
        updated = replace(session, state=state, safety_mode=mode or session.safety_mode)
        return self._store(user_id, session, updated)

    def flag(self, user_id: str, x: int, y: int) -> GameSession:
        session = self._require(user_id)
        if session.abandoned:
            return session
        state = engine_flag(session.state, x, y, self.clock())
        if state is session.state:
            return session
        return self._store(user_id, session, replace(session, state=state))

    def chord(self, user_id: str, x: int, y: int) -> GameSession:
        session = self._require(user_id)
        if session.abandoned:
            return session
        state = engine_chord(session.state, x, y, self.clock())
        if state is session.state:
            return session
        return self._store(user_id, session, replace(session, state=state))

    def abandon(self, user_id: str) -> GameSession:
        session = self._require(user_id)
        if not session.active:
            return session
        updated = replace(session, abandoned=True)
        self.games[user_id] = updated
        logger.debug("game for %s abandoned", user_id)
        return updated

    def to_client(self, session: GameSession) -> Dict[str, Any]:
        s = session.state
        return {
            "status": session.status,
            "difficulty": session.difficulty,
            "board_width": s.config.width,
            "board_height": s.config.height,
            "mine_count": s.config.mine_count,
            "seed": s.config.seed,
            "generated": s.generated,
            "first_click_index": s.first_click_index,
            "safety_mode": session.safety_mode,
            "revealed_total": s.revealed_count,
            "flags_total": s.flags_count,
            "score": s.score,
            "correct_streak": s.correct_streak,
            "created_ms": session.created_ms,
            "start_ms": s.start_ms,
            "end_ms": s.end_ms,
            "board": to_client_view(s),
        }
