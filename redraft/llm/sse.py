"""
Server-sent-event decoder for chat completions that arrive as
``data: <json>`` frames.
"""

import codecs
import json
from typing import Callable, Iterable, Optional

import requests

from ..logger import log

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def openai_delta(frame: dict) -> Optional[str]:
    """Extract ``choices[0].delta.content`` from an OpenAI-style chunk."""
    choices = frame.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


class StreamDecoder:
    """Reassembles streamed text from raw network chunks.

    Holds only the decoded text so far and the trailing partial line; a new
    decoder is created for every call.
    """

    def __init__(self, extract: Callable[[dict], Optional[str]] = openai_delta,
                 source: str = "Stream"):
        self._extract = extract
        self._source = source
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._parts: list[str] = []
        self.frames = 0
        self.bad_frames = 0

    def feed(self, chunk: bytes | str) -> None:
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._pending += chunk
        lines = self._pending.split("\n")
        self._pending = lines.pop()
        for line in lines:
            self._handle_line(line)

    def close(self) -> str:
        """Flush any trailing partial line and return the assembled text."""
        self._pending += self._utf8.decode(b"", final=True)
        if self._pending:
            self._handle_line(self._pending)
            self._pending = ""
        return self.text

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def _handle_line(self, line: str) -> None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return
        payload = line[len(DATA_PREFIX):].strip()
        if not payload or payload == DONE_SENTINEL:
            return
        try:
            frame = json.loads(payload)
        except json.JSONDecodeError as e:
            self.bad_frames += 1
            log.warning(f"[{self._source}] Skipping malformed stream frame: {e}")
            return
        self.frames += 1
        if not isinstance(frame, dict):
            return
        try:
            token = self._extract(frame)
        except (AttributeError, KeyError, IndexError, TypeError) as e:
            self.bad_frames += 1
            log.warning(f"[{self._source}] Skipping unexpected stream frame: {e!r}")
            return
        if isinstance(token, str) and token:
            self._parts.append(token)


def decode_chunks(chunks: Iterable[bytes | str],
                  extract: Callable[[dict], Optional[str]] = openai_delta,
                  source: str = "Stream") -> str:
    decoder = StreamDecoder(extract, source=source)
    for chunk in chunks:
        decoder.feed(chunk)
    result = decoder.close()
    log.debug(f"[{source}] Decoded {decoder.frames} frame(s), "
              f"skipped {decoder.bad_frames}, {len(result)} chars")
    return result


def decode_response(response,
                    extract: Callable[[dict], Optional[str]] = openai_delta,
                    source: str = "Stream") -> str:
    """Decode a streaming ``requests`` response, always closing it.

    A dropped connection ends the stream early; whatever arrived before the
    drop is returned and the caller decides whether it is enough.
    """
    decoder = StreamDecoder(extract, source=source)
    try:
        for chunk in response.iter_content(chunk_size=None):
            decoder.feed(chunk)
    except (requests.exceptions.ChunkedEncodingError,
            requests.exceptions.ConnectionError) as e:
        log.warning(f"[{source}] Stream ended early: {e}")
    finally:
        response.close()
    result = decoder.close()
    log.debug(f"[{source}] Decoded {decoder.frames} frame(s), "
              f"skipped {decoder.bad_frames}, {len(result)} chars")
    return result
