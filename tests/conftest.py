import io
import threading


class RecordingSource(io.BytesIO):
    """BytesIO counting how many times it is closed."""

    def __init__(self, data: bytes = b""):
        super().__init__(data)
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


class FaultySource(RecordingSource):
    """Yields the given raw lines, then fails like a broken pipe."""

    def __init__(self, raw_lines: list[bytes]):
        super().__init__()
        self._raw_lines = list(raw_lines)

    def readline(self, size=-1):
        if self._raw_lines:
            return self._raw_lines.pop(0)
        raise OSError("Connection reset by peer")


class UnclosableSource(RecordingSource):
    """Counts close calls but fails to close."""

    def close(self):
        super().close()
        raise OSError("Bad file descriptor")


class GatedSource(RecordingSource):
    """Blocks every read until the gate is opened."""

    def __init__(self, data: bytes, gate: threading.Event):
        super().__init__(data)
        self.gate = gate
        self.reader_thread_names = set()

    def readline(self, size=-1):
        self.reader_thread_names.add(threading.current_thread().name)
        self.gate.wait()
        return super().readline(size)
