"""
Module providing the `LineCollector`, which drains a byte source into a list of lines on a background thread.
"""
import itertools
import logging
import threading
from concurrent.futures import Future
from typing import BinaryIO, Callable

from stream_collector.components.errors import StreamReadError
from stream_collector.components.readers.byte_stream_reader import ByteStreamReader
from stream_collector.config import CollectorConfig

logger = logging.getLogger(__name__)


class LineCollector:
    """
    Read a byte source line by line on a dedicated thread and keep the decoded lines in read order.

    The collector owns the source: it is read to EOF and closed exactly once, whether the
    collection succeeds or not. Completion is reported through a `concurrent.futures.Future`
    that resolves to the final, immutable tuple of lines, or raises the `StreamReadError`
    that stopped the collection.

    A collector can only be run once.
    """

    _thread_ids = itertools.count(1)

    def __init__(self,
                 source: BinaryIO,
                 encoding: str | None = None,
                 config: CollectorConfig | None = None,
                 on_line: Callable[[str], None] | None = None):
        """
        Initialize the LineCollector. Nothing is read from the source until `start` or `run` is called.
        Args:
            source: A readable byte stream, closed by the collector once the collection ends.
            encoding: The name of the encoding used to decode the source. Takes precedence over
                `config.encoding`; if both are unset, the platform default decoding is used.
            config: A `CollectorConfig`, default values are used if not given.
            on_line: Called on the collection thread with each line, right after it is stored.
        Raises:
            UnsupportedEncodingError: If the encoding is not a known codec.
        """
        self._config = config or CollectorConfig()
        self._on_line = on_line
        self._source = source
        self._reader = ByteStreamReader(source,
                                        encoding=encoding if encoding is not None else self._config.encoding,
                                        errors=self._config.errors)

        self._lines: list[str] = []
        self._lock = threading.Lock()
        self._started = False
        self._thread: threading.Thread | None = None
        self._future: Future[tuple[str, ...]] = Future()

    @property
    def encoding(self) -> str:
        return self._reader.encoding

    @property
    def lines(self) -> tuple[str, ...]:
        """
        Snapshot of the lines collected so far. Only final once `done` is True.
        """
        with self._lock:
            return tuple(self._lines)

    @property
    def started(self) -> bool:
        return self._started

    @property
    def done(self) -> bool:
        """
        True once the collection has ended, successfully or not.
        """
        return self._future.done()

    def start(self) -> Future[tuple[str, ...]]:
        """
        Start the collection on a new thread.
        Returns:
            The completion handle of the collection.
        Raises:
            RuntimeError: If the collector has already been started.
        """
        self._mark_started()
        self._thread = threading.Thread(target=self._collect,
                                        name=f"{self._config.thread_name_prefix}-{next(self._thread_ids)}",
                                        daemon=self._config.daemon)
        self._thread.start()
        return self._future

    def run(self) -> tuple[str, ...]:
        """
        Run the collection on the calling thread and return the collected lines.
        Raises:
            StreamReadError: If reading or decoding the source fails.
            RuntimeError: If the collector has already been started.
        """
        self._mark_started()
        self._collect()
        return self._future.result()

    def join(self, timeout: float | None = None) -> None:
        """
        Wait for the collection thread to end. Returns immediately if no thread was started.
        """
        if self._thread is not None:
            self._thread.join(timeout)

    def result(self, timeout: float | None = None) -> tuple[str, ...]:
        """
        Wait for the collection to end and return all the lines.
        Raises:
            StreamReadError: If the collection failed.
            TimeoutError: If the collection did not end within `timeout` seconds.
        """
        return self._future.result(timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        return self._future.exception(timeout)

    def _mark_started(self):
        with self._lock:
            if self._started:
                raise RuntimeError("A LineCollector can only be started once")
            self._started = True
        # The future is never handed out before this point, so it cannot have been cancelled
        self._future.set_running_or_notify_cancel()

    def _read_all(self):
        try:
            for line in self._reader.read():
                with self._lock:
                    self._lines.append(line)
                if self._on_line is not None:
                    self._on_line(line)
        except (OSError, ValueError) as e:
            # UnicodeDecodeError is a ValueError, as is reading from an already closed stream
            raise StreamReadError(f"Failed to read lines from {self._source!r}: {e}") from e

    def _close_source(self):
        try:
            self._source.close()
        except Exception:
            logger.exception("Failed to close %r, ignoring", self._source)

    def _collect(self):
        logger.debug("Collecting lines from %r with encoding %s", self._source, self.encoding)
        error: Exception | None = None
        try:
            self._read_all()
        except Exception as e:
            error = e
        finally:
            self._close_source()

        if error is None:
            logger.debug("Collected %i lines from %r", len(self._lines), self._source)
            self._future.set_result(self.lines)
        else:
            logger.error("Collection stopped after %i lines: %s", len(self._lines), error)
            self._future.set_exception(error)


def collect_lines(source: BinaryIO,
                  encoding: str | None = None,
                  config: CollectorConfig | None = None) -> Future[tuple[str, ...]]:
    """
    Start collecting the lines of `source` on a background thread.
    Returns:
        The completion handle of the collection, resolving to the tuple of lines.
    """
    return LineCollector(source, encoding=encoding, config=config).start()
