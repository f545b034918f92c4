from fastapi.testclient import TestClient

from app.main import create_app
from minesweeper.persistence import InMemoryPersistence


def make_client():
    app = create_app(persistence=InMemoryPersistence())
    return TestClient(app)


def test_presets():
    c = make_client()
    r = c.get("/api/minesweeper/presets")
    assert r.status_code == 200
    ids = [p["id"] for p in r.json()]
    assert ids == ["beginner", "intermediate", "expert"]


def test_start_and_state_and_409():
    c = make_client()
    headers = {"X-User-Id": "u1"}
    r = c.post("/api/minesweeper/start", json={"difficulty": "beginner", "seed": "seed:neighbors"}, headers=headers)
    assert r.status_code == 200
    s = c.get("/api/minesweeper/state", headers=headers).json()
    assert s["board_width"] == 9 and s["board_height"] == 9
    assert s["seed"] == "seed:neighbors"
    assert s["game_id"] == "u1"
    r2 = c.post("/api/minesweeper/start", json={}, headers=headers)
    assert r2.status_code == 409


def test_state_without_game_404():
    c = make_client()
    r = c.get("/api/minesweeper/state", headers={"X-User-Id": "ghost"})
    assert r.status_code == 404
    r = c.post("/api/minesweeper/reveal", json={"x": 0, "y": 0}, headers={"X-User-Id": "ghost"})
    assert r.status_code == 404


def test_reveal_flag_chord_and_loss():
    c = make_client()
    headers = {"X-User-Id": "u2"}
    c.post("/api/minesweeper/start", json={"seed": "seed:neighbors"}, headers=headers)

    s1 = c.post("/api/minesweeper/reveal", json={"x": 0, "y": 0}, headers=headers).json()
    assert s1["generated"] is True
    assert s1["first_click_index"] == 0
    assert s1["safety_mode"] == "neighbors"
    assert s1["score"] == 10
    assert s1["board"][0][0] == "0"

    s2 = c.post("/api/minesweeper/flag", json={"x": 4, "y": 1}, headers=headers).json()
    assert s2["flags_total"] == 1
    assert s2["board"][1][4] == "F"

    s3 = c.post("/api/minesweeper/chord", json={"x": 8, "y": 8}, headers=headers).json()
    assert s3["revealed_total"] == s1["revealed_total"]

    # unflag and step on the mine at index 13
    c.post("/api/minesweeper/flag", json={"x": 4, "y": 1}, headers=headers)
    s4 = c.post("/api/minesweeper/reveal", json={"x": 4, "y": 1}, headers=headers).json()
    assert s4["status"] == "lost"
    assert s4["score"] == -10
    assert s4["correct_streak"] == 0
    assert sum(row.count("M") for row in s4["board"]) == 10

    # a finished game can be replaced
    r = c.post("/api/minesweeper/start", json={"difficulty": "intermediate"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["board_width"] == 16


def test_abandon_then_restart():
    c = make_client()
    headers = {"X-User-Id": "u3"}
    c.post("/api/minesweeper/start", json={}, headers=headers)
    r = c.post("/api/minesweeper/abandon", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "abandoned"
    r = c.post("/api/minesweeper/start", json={}, headers=headers)
    assert r.status_code == 200


def test_custom_validation_400():
    c = make_client()
    headers = {"X-User-Id": "u4"}
    r = c.post(
        "/api/minesweeper/start",
        json={"difficulty": "custom", "width": 3, "height": 3, "mine_count": 2},
        headers=headers,
    )
    assert r.status_code == 400
    assert "invalid_width" in r.text
    r = c.post("/api/minesweeper/start", json={"difficulty": "custom", "width": 9}, headers=headers)
    assert r.status_code == 400
    assert "custom_spec_incomplete" in r.text


def test_out_of_range_move_is_noop():
    c = make_client()
    headers = {"X-User-Id": "u5"}
    c.post("/api/minesweeper/start", json={"seed": "x"}, headers=headers)
    r = c.post("/api/minesweeper/reveal", json={"x": 99, "y": 99}, headers=headers)
    assert r.status_code == 200
    assert r.json()["generated"] is False
    r = c.post("/api/minesweeper/reveal", json={"x": -1, "y": 0}, headers=headers)
    assert r.status_code == 422


def test_isolation_with_google_headers():
    c = make_client()
    g1 = {"X-Goog-Authenticated-User-Email": "accounts.google.com:alice@example.com"}
    g2 = {"X-Goog-Authenticated-User-Email": "accounts.google.com:bob@example.com"}
    c.post("/api/minesweeper/start", json={"seed": "same"}, headers=g1)
    c.post("/api/minesweeper/start", json={"seed": "same"}, headers=g2)
    c.post("/api/minesweeper/reveal", json={"x": 0, "y": 0}, headers=g1)
    s_alice = c.get("/api/minesweeper/state", headers=g1).json()
    s_bob = c.get("/api/minesweeper/state", headers=g2).json()
    assert s_alice["game_id"] == "alice@example.com"
    assert s_alice["generated"] is True
    assert s_bob["generated"] is False
