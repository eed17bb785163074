# httpload/logsink.py
import threading
from typing import TextIO

from httpload import settings
from httpload.errors import OutputFileError
from httpload.metrics import RequestOutcome


def format_outcome(outcome: RequestOutcome, capture: str):
    """Log line for one outcome, or None when the capture level writes nothing."""
    ts = outcome.started_at.strftime("%H:%M:%S.%f")[:-3]
    ms = outcome.elapsed_ns // 1_000_000
    if capture == settings.CAPTURE_SIMPLE:
        return f'"{ts}: {outcome.url}": {outcome.status_code}:, {ms}ms'
    if capture == settings.CAPTURE_FULL:
        return f'"{ts}: {outcome.url}": {outcome.status_code}: "{outcome.message}", {ms}ms'
    return None


class LogSink:
    """
    Append-only text output of a run. One writer at a time, each line
    written whole. Buffered writes are flushed when the sink is closed.
    """

    def __init__(self, stream: TextIO, capture: str = settings.CAPTURE_NONE):
        self._stream = stream
        self._lock = threading.Lock()
        self.capture = (capture or settings.CAPTURE_NONE).lower()

    @classmethod
    def open(cls, path: str, capture: str = settings.CAPTURE_NONE) -> "LogSink":
        try:
            stream = open(path, "w", encoding="utf-8")
        except OSError as e:
            raise OutputFileError(f"error creating output file: {e}") from e
        return cls(stream, capture)

    def append_line(self, line: str = ""):
        with self._lock:
            self._stream.write(line + "\n")

    def write_outcome(self, outcome: RequestOutcome):
        line = format_outcome(outcome, self.capture)
        if line is not None:
            self.append_line(line)

    def close(self):
        with self._lock:
            self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
