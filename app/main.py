import os
import logging
from pathlib import Path
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from minesweeper.persistence import InMemoryPersistence
from minesweeper.presets import PRESETS

load_dotenv(dotenv_path=Path('.env.local'))

API_BASE = "/api/minesweeper"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class StartBody(BaseModel):
    difficulty: Literal["beginner", "intermediate", "expert", "custom"] = "beginner"
    width: Optional[int] = Field(None, ge=1)
    height: Optional[int] = Field(None, ge=1)
    mine_count: Optional[int] = Field(None, ge=1)
    seed: Optional[str] = Field(None, min_length=1, max_length=128)


class MoveBody(BaseModel):
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)


def create_app(persistence=None) -> FastAPI:
    app = FastAPI(title="Minesweeper Studio", version="0.1.0")

    origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.state.persistence = persistence or InMemoryPersistence()
    logger = logging.getLogger("uvicorn.error")
    logger.info(
        f"[minesweeper] Persistence={app.state.persistence.__class__.__name__} "
        f"TRUST_X_USER_ID={int(_env_flag('TRUST_X_USER_ID', '1'))} ALLOW_ANON={int(_env_flag('ALLOW_ANON', '1'))}"
    )

    def get_user_id(req: Request) -> str:
        trust_x_user_id = _env_flag("TRUST_X_USER_ID", "1")
        allow_anon = _env_flag("ALLOW_ANON", "1")
        default_uid = os.getenv("DEFAULT_USER_ID", "local-user")

        iap_email = (
            req.headers.get("X-Goog-Authenticated-User-Email")
            or req.headers.get("X-Authenticated-User-Email")
            or req.headers.get("X-Forwarded-Email")
        )
        if iap_email:
            # "accounts.google.com:email@example.com"
            if ":" in iap_email:
                iap_email = iap_email.split(":", 1)[1]
            return iap_email

        uid = req.headers.get("X-User-Id")
        if uid and trust_x_user_id:
            return uid

        if allow_anon:
            return default_uid

        logger.warning(
            f"[minesweeper] get_user_id missing user id "
            f"trust_x_user_id={int(trust_x_user_id)} allow_anon={int(allow_anon)}"
        )
        raise HTTPException(status_code=401, detail="missing user id")

    def client_view(session, user_id: str) -> dict:
        return app.state.persistence.to_client(session) | {"game_id": user_id}

    def require_game(user_id: str):
        game = app.state.persistence.get_game(user_id)
        if not game:
            raise HTTPException(status_code=404, detail="no game")
        return game

    @app.get(f"{API_BASE}/presets")
    def list_presets():
        return [
            {
                "id": p.id,
                "label": p.label,
                "width": p.spec.width,
                "height": p.spec.height,
                "mine_count": p.spec.mine_count,
            }
            for p in PRESETS.values()
        ]

    @app.post(f"{API_BASE}/start")
    def start_game(body: StartBody, user_id: str = Depends(get_user_id)):
        try:
            session = app.state.persistence.start_game(
                user_id,
                body.difficulty,
                body.width,
                body.height,
                body.mine_count,
                body.seed,
            )
        except ValueError as e:
            if str(e) == "active_game_exists":
                raise HTTPException(status_code=409, detail="active game exists")
            raise HTTPException(status_code=400, detail=str(e))
        logger.info(
            f"[minesweeper] start user_id={user_id} difficulty={body.difficulty} "
            f"seed={session.state.config.seed}"
        )
        return client_view(session, user_id)

    @app.get(f"{API_BASE}/state")
    def get_state(user_id: str = Depends(get_user_id)):
        return client_view(require_game(user_id), user_id)

    def _move(action, body: MoveBody, user_id: str):
        require_game(user_id)
        try:
            session = action(user_id, body.x, body.y)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return client_view(session, user_id)

    @app.post(f"{API_BASE}/reveal")
    def reveal(body: MoveBody, user_id: str = Depends(get_user_id)):
        return _move(app.state.persistence.reveal, body, user_id)

    @app.post(f"{API_BASE}/flag")
    def flag(body: MoveBody, user_id: str = Depends(get_user_id)):
        return _move(app.state.persistence.flag, body, user_id)

    @app.post(f"{API_BASE}/chord")
    def chord(body: MoveBody, user_id: str = Depends(get_user_id)):
        return _move(app.state.persistence.chord, body, user_id)

    @app.post(f"{API_BASE}/abandon")
    def abandon(user_id: str = Depends(get_user_id)):
        require_game(user_id)
        return client_view(app.state.persistence.abandon(user_id), user_id)

    return app


app = create_app()
