"""Utilities for parsing agent output streams into structured messages."""

import json
import logging
from typing import Any, Callable, Dict, List, Union

logger = logging.getLogger(__name__)

# A parsed JSON object, or a raw text span that wasn't valid JSON
StreamItem = Union[Dict[str, Any], str]


class StreamingJSONExtractor:
    """Incrementally split a chunked output stream into JSON objects and text.

    Chunks may cut an object (or an escape sequence inside a string) anywhere;
    the emitted sequence depends only on the concatenated stream, never on how
    it was chunked.

    Usage:
        extractor = StreamingJSONExtractor(callbacks.on_update)
        for chunk in chunks:
            extractor.append(chunk)
        extractor.flush()
    """

    def __init__(self, on_message: Callable[[StreamItem], None]):
        self._on_message = on_message
        self._buffer = ""
        # Last emission ended at the buffer edge, so a newline at the start
        # of the next chunk still belongs to that object
        self._skip_leading_newline = False

    @property
    def buffer(self) -> str:
        """Unconsumed tail waiting for more input."""
        return self._buffer

    def append(self, chunk: str) -> None:
        """Add a chunk and emit every object it completes."""
        chunk = chunk.replace("\0", "")
        if not chunk:
            return

        if self._skip_leading_newline:
            self._skip_leading_newline = False
            if chunk.startswith("\n"):
                chunk = chunk[1:]

        self._buffer += chunk
        self._process_buffer()

    def _process_buffer(self) -> None:
        buffer = self._buffer
        depth = 0
        in_string = False
        escaped = False
        start = 0

        for i, char in enumerate(buffer):
            if escaped:
                escaped = False
                continue

            if char == "\\" and in_string:
                escaped = True
                continue

            if char == '"':
                in_string = not in_string
                continue

            if in_string:
                continue

            if char == "{":
                depth += 1
            elif char == "}":
                if depth == 0:
                    # Stray closing brace in plain text
                    continue
                depth -= 1
                if depth == 0:
                    self._emit_span(buffer[start:i + 1])
                    start = i + 1
                    if start < len(buffer) and buffer[start] == "\n":
                        start += 1
                    elif start == len(buffer):
                        self._skip_leading_newline = True

        self._buffer = buffer[start:]

    def _emit_span(self, span: str) -> None:
        try:
            parsed = json.loads(span)
        except json.JSONDecodeError:
            self._on_message(span)
            return
        self._on_message(parsed)

    def flush(self) -> None:
        """Emit any remaining non-JSON output as raw text."""
        if self._buffer.strip():
            self._on_message(self._buffer)
        self._buffer = ""
        self._skip_leading_newline = False


def parse_stream_json_messages(content: str) -> List[Dict[str, Any]]:
    """
    Parse newline-delimited JSON agent output into message dictionaries.

    Lines that fail to parse, or that don't carry a string ``type`` field,
    are skipped.

    Args:
        content: Raw stdout (one JSON object per line)

    Returns:
        List of message dictionaries in stream order
    """
    messages = []
    for line in content.strip().split("\n"):
        if not line.strip():
            continue

        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping non-JSON stream line: {e}")
            continue

        if not isinstance(data, dict) or not isinstance(data.get("type"), str):
            logger.debug("Skipping stream line without a message type")
            continue

        messages.append(data)

    return messages
