"""Tests for game sources.

Validates:
1. Lichess request shape (URL, params, headers)
2. Streaming decode through the HTTP response
3. Response is closed when the consumer stops early
4. HTTP errors propagate
5. Replay source applies perf / since / max filters
"""

import json

import pytest
import requests

from elokline.providers.lichess import LichessGameSource, stream_user_games
from elokline.providers.ndjson import GameDecodeError
from elokline.providers.replay import ReplayGameSource

DAY_MS = 86_400_000
BASE_DAY_MS = 1_700_006_400_000


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(self, chunks: list[bytes], status_code: int = 200):
        self.chunks = chunks
        self.status_code = status_code
        self.closed = False
        self.chunk_sizes: list[int] = []

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size=1):
        self.chunk_sizes.append(chunk_size)
        yield from self.chunks

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeSession:
    """Records get() calls and returns a canned response."""

    def __init__(self, response: FakeResponse):
        self.response = response
        self.calls: list[dict] = []

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        return self.response


def ndjson(games: list[dict]) -> bytes:
    return "".join(json.dumps(g) + "\n" for g in games).encode("utf-8")


class TestLichessGameSource:
    """Test the HTTP-backed source."""

    def test_request_shape(self, make_game_dict):
        """Request carries rated/perf/max/moves params and NDJSON accept."""
        session = FakeSession(FakeResponse([ndjson([make_game_dict("g1", BASE_DAY_MS)])]))
        source = LichessGameSource(base_url="https://lichess.test/api/", session=session)

        list(source.stream_games("Alice", "rapid", max_games=50))

        call = session.calls[0]
        assert call["url"] == "https://lichess.test/api/games/user/Alice"
        assert call["params"] == {"rated": "true", "perfType": "rapid", "max": 50, "moves": "false"}
        assert call["headers"]["Accept"] == "application/x-ndjson"
        assert "Authorization" not in call["headers"]
        assert call["stream"] is True

    def test_since_and_token(self, make_game_dict):
        """since and bearer token are sent when configured."""
        session = FakeSession(FakeResponse([b""]))
        source = LichessGameSource(token="secret", session=session)

        list(source.stream_games("alice", "blitz", since_ms=BASE_DAY_MS))

        call = session.calls[0]
        assert call["params"]["since"] == BASE_DAY_MS
        assert call["headers"]["Authorization"] == "Bearer secret"

    def test_lazy_until_iterated(self):
        """No request is made until the iterator is consumed."""
        session = FakeSession(FakeResponse([]))
        source = LichessGameSource(session=session)

        stream = source.stream_games("alice", "blitz")

        assert session.calls == []
        assert list(stream) == []
        assert len(session.calls) == 1

    def test_decodes_split_chunks(self, make_game_dict):
        """Records split across response chunks are reassembled."""
        payload = ndjson([make_game_dict(f"g{i}", BASE_DAY_MS + i) for i in range(4)])
        chunks = [payload[i : i + 9] for i in range(0, len(payload), 9)]
        response = FakeResponse(chunks)
        source = LichessGameSource(session=FakeSession(response), chunk_size=9)

        games = list(source.stream_games("alice", "blitz"))

        assert [g.id for g in games] == ["g0", "g1", "g2", "g3"]
        assert response.chunk_sizes == [9]
        assert response.closed

    def test_early_close_releases_response(self, make_game_dict):
        """Closing the generator closes the HTTP response."""
        payload = ndjson([make_game_dict(f"g{i}", BASE_DAY_MS + i) for i in range(3)])
        response = FakeResponse([payload])
        stream = LichessGameSource(session=FakeSession(response)).stream_games("alice", "blitz")

        next(stream)
        assert not response.closed
        stream.close()
        assert response.closed

    def test_http_error_propagates(self):
        """An error status raises HTTPError."""
        response = FakeResponse([], status_code=404)
        source = LichessGameSource(session=FakeSession(response))

        with pytest.raises(requests.HTTPError):
            list(source.stream_games("nobody", "blitz"))
        assert response.closed

    def test_corrupt_line_propagates(self, make_game_dict):
        """A corrupt line aborts the stream after earlier records."""
        payload = ndjson([make_game_dict("g1", BASE_DAY_MS)]) + b"{broken\n"
        source = LichessGameSource(session=FakeSession(FakeResponse([payload])))

        stream = source.stream_games("alice", "blitz")
        assert next(stream).id == "g1"
        with pytest.raises(GameDecodeError):
            next(stream)

    def test_stream_user_games_uses_given_source(self, make_game_dict):
        """The convenience function delegates to the source."""
        source = ReplayGameSource.from_games([make_game_dict("g1", BASE_DAY_MS)])
        games = list(stream_user_games("alice", "blitz", max_games=10, source=source))
        assert [g.id for g in games] == ["g1"]
        assert source.calls[0]["max_games"] == 10


class TestReplayGameSource:
    """Test the offline replay source."""

    def test_filters_perf(self, make_game_dict):
        """Only games of the requested perf are replayed."""
        source = ReplayGameSource.from_games(
            [
                make_game_dict("g1", BASE_DAY_MS, perf="blitz"),
                make_game_dict("g2", BASE_DAY_MS + 1, perf="rapid"),
            ]
        )
        assert [g.id for g in source.stream_games("alice", "rapid")] == ["g2"]

    def test_filters_since(self, make_game_dict):
        """Games before since_ms are skipped."""
        source = ReplayGameSource.from_games(
            [
                make_game_dict("g1", BASE_DAY_MS),
                make_game_dict("g2", BASE_DAY_MS + DAY_MS),
            ]
        )
        games = list(source.stream_games("alice", "blitz", since_ms=BASE_DAY_MS + DAY_MS))
        assert [g.id for g in games] == ["g2"]
        assert source.calls[0]["since_ms"] == BASE_DAY_MS + DAY_MS

    def test_max_games(self, make_game_dict):
        """Replay stops at max_games."""
        source = ReplayGameSource.from_games(
            [make_game_dict(f"g{i}", BASE_DAY_MS + i) for i in range(5)], chunk_size=3
        )
        assert len(list(source.stream_games("alice", "blitz", max_games=3))) == 3

    def test_from_file(self, make_game_dict, tmp_path):
        """An NDJSON export on disk can be replayed."""
        path = tmp_path / "games.ndjson"
        path.write_bytes(ndjson([make_game_dict("g1", BASE_DAY_MS)]))
        source = ReplayGameSource.from_file(path)
        assert [g.id for g in source.stream_games("alice", "blitz")] == ["g1"]

    def test_invalid_chunk_size(self):
        """chunk_size must be positive."""
        with pytest.raises(ValueError):
            ReplayGameSource(b"", chunk_size=0)
