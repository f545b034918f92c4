import itertools

import pytest

from minesweeper.errors import InvalidSpec
from minesweeper.persistence import ABANDONED, InMemoryPersistence


def make_store():
    ticks = itertools.count(1000, 10)
    return InMemoryPersistence(clock=lambda: next(ticks))


def test_start_game_uses_preset_and_seed():
    p = make_store()
    session = p.start_game("u1", "beginner", seed="seed:neighbors")
    assert session.state.config.width == 9
    assert session.state.config.mine_count == 10
    assert session.state.config.seed == "seed:neighbors"
    assert session.created_ms == 1000
    assert p.get_game("u1") is session


def test_start_game_generates_random_seed():
    p = make_store()
    session = p.start_game("u1")
    seed = session.state.config.seed
    assert len(seed) == 16
    int(seed, 16)


def test_active_game_blocks_new_start():
    p = make_store()
    p.start_game("u1")
    with pytest.raises(ValueError, match="active_game_exists"):
        p.start_game("u1")
    p.abandon("u1")
    p.start_game("u1", "expert")
    assert p.get_game("u1").state.config.width == 30


def test_custom_spec_is_validated():
    p = make_store()
    with pytest.raises(InvalidSpec):
        p.start_game("u1", "custom", 3, 3, 1)
    session = p.start_game("u1", "custom", 6, 5, 4)
    assert session.state.config.total == 30


def test_reveal_records_safety_mode_and_times():
    p = make_store()
    p.start_game("u1", "beginner", seed="seed:neighbors")
    session = p.reveal("u1", 0, 0)
    assert session.safety_mode == "neighbors"
    assert session.state.start_ms == 1010
    assert session.state.revealed[0] == 1
    # mine at index 13
    lost = p.reveal("u1", 4, 1)
    assert lost.status == "lost"
    assert lost.state.end_ms is not None
    assert lost.safety_mode == "neighbors"
    assert lost.state.score == -10


def test_noop_move_keeps_session():
    p = make_store()
    p.start_game("u1", "beginner", seed="seed:neighbors")
    first = p.reveal("u1", 0, 0)
    assert p.reveal("u1", 0, 0) is first
    assert p.chord("u1", 50, 50) is first


def test_flag_and_abandon():
    p = make_store()
    p.start_game("u1")
    session = p.flag("u1", 2, 2)
    assert session.state.flags_count == 1
    abandoned = p.abandon("u1")
    assert abandoned.status == ABANDONED
    assert p.reveal("u1", 0, 0) is abandoned
    assert p.flag("u1", 2, 2) is abandoned


def test_missing_game_raises_key_error():
    p = make_store()
    with pytest.raises(KeyError):
        p.reveal("nobody", 0, 0)


def test_players_are_isolated():
    p = make_store()
    p.start_game("a", seed="s1")
    p.start_game("b", seed="s1")
    p.reveal("a", 4, 4)
    assert p.get_game("a").state.generated
    assert not p.get_game("b").state.generated


def test_to_client_shape():
    p = make_store()
    session = p.start_game("u1", "custom", 5, 5, 3, seed="abc")
    doc = p.to_client(session)
    assert doc["status"] == "playing"
    assert doc["board_width"] == 5 and doc["board_height"] == 5
    assert doc["mine_count"] == 3
    assert doc["seed"] == "abc"
    assert doc["safety_mode"] is None
    assert doc["board"] == [["H"] * 5 for _ in range(5)]
