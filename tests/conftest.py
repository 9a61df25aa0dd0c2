"""Shared pytest fixtures for elokline tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from elokline.db.schema import Base
from elokline.models.types import RawGame

DAY_MS = 86_400_000
# 2023-11-15 00:00:00 UTC
BASE_DAY_MS = 1_700_006_400_000


def build_game_dict(
    game_id: str,
    created_at: int,
    *,
    username: str = "alice",
    opponent: str = "bob",
    color: str = "white",
    rating: float | None = 1500,
    rating_diff: float | None = 10,
    winner: str | None = "white",
    status: str = "resign",
    perf: str = "blitz",
) -> dict:
    """Build a game in Lichess wire format with the user on `color`."""
    me = {"user": {"name": username, "id": username.lower()}, "rating": rating}
    if rating_diff is not None:
        me["ratingDiff"] = rating_diff
    them = {
        "user": {"name": opponent, "id": opponent.lower()},
        "rating": 1600,
        "ratingDiff": -(rating_diff or 0),
    }
    players = {"white": me, "black": them} if color == "white" else {"white": them, "black": me}

    game = {
        "id": game_id,
        "rated": True,
        "variant": "standard",
        "speed": perf,
        "perf": perf,
        "createdAt": created_at,
        "lastMoveAt": created_at + 300_000,
        "status": status,
        "players": players,
    }
    if winner is not None:
        game["winner"] = winner
    return game


@pytest.fixture
def make_game_dict():
    """Factory for wire-format game dicts."""
    return build_game_dict


@pytest.fixture
def make_game():
    """Factory for validated RawGame models."""

    def _make(*args, **kwargs) -> RawGame:
        return RawGame.model_validate(build_game_dict(*args, **kwargs))

    return _make


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
