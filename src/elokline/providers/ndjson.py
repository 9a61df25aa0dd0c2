"""Incremental NDJSON decoding.

The upstream delivers an arbitrarily chunked byte stream. One partial-line
buffer is kept across chunks: every chunk is appended, complete lines are
decoded and yielded immediately, and the trailing fragment is retained.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, Iterable, Iterator

from pydantic import ValidationError

from elokline.models.types import RawGame

logger = logging.getLogger(__name__)


class GameDecodeError(ValueError):
    """Raised when a non-blank line cannot be decoded into a game.

    Fatal: a corrupt line cannot be told apart from a line-splitting bug,
    so the stream is aborted rather than resumed.
    """

    def __init__(self, message: str, line: str):
        super().__init__(message)
        self.line = line


def _decode_line(line: str) -> Any:
    try:
        return json.loads(line)
    except json.JSONDecodeError as e:
        preview = line if len(line) <= 120 else line[:117] + "..."
        raise GameDecodeError(f"Invalid JSON line: {e.msg}: {preview!r}", line) from e


def iter_ndjson(chunks: Iterable[bytes | str]) -> Iterator[Any]:
    """Decode newline-delimited JSON from a chunked stream.

    Args:
        chunks: Byte or text chunks of any size. Byte chunks are decoded
            as UTF-8 incrementally, so characters split across chunks
            are handled.

    Yields:
        One decoded JSON value per non-blank line, in stream order.

    Raises:
        GameDecodeError: If a non-blank line is not valid JSON.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""

    for chunk in chunks:
        if isinstance(chunk, bytes):
            buffer += decoder.decode(chunk)
        else:
            buffer += chunk

        lines = buffer.split("\n")
        buffer = lines.pop()
        for line in lines:
            if not line.strip():
                continue
            yield _decode_line(line)

    # Upstream closed: an unterminated last line is still one record
    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        yield _decode_line(buffer)


def parse_game(payload: Any) -> RawGame:
    """Validate one decoded JSON object as a RawGame.

    Raises:
        GameDecodeError: If the object does not match the game schema.
    """
    try:
        return RawGame.model_validate(payload)
    except ValidationError as e:
        line = json.dumps(payload) if isinstance(payload, (dict, list)) else repr(payload)
        raise GameDecodeError(f"Invalid game record: {e.error_count()} error(s)", line) from e


def iter_games(chunks: Iterable[bytes | str], max_games: int | None = None) -> Iterator[RawGame]:
    """Decode a chunked NDJSON stream into games.

    Args:
        chunks: Raw stream chunks.
        max_games: Stop after this many games (None for no limit).

    Yields:
        RawGame records as soon as their line is complete.
    """
    count = 0
    if max_games is not None and max_games <= 0:
        return
    for payload in iter_ndjson(chunks):
        yield parse_game(payload)
        count += 1
        if max_games is not None and count >= max_games:
            logger.debug(f"Reached max_games={max_games}, stopping stream")
            return
