"""
Module providing a reader that decodes a byte stream and yields its lines.
"""
import codecs
from typing import BinaryIO, Generator

from stream_collector.components.encoding import resolve_encoding
from stream_collector.components.line_splitter import LineSplitter
from stream_collector.components.readers.base_reader import BaseReader


class ByteStreamReader(BaseReader):
    def __init__(self, source: BinaryIO, encoding: str | None = None, errors: str = "strict"):
        """
        Initialize the ByteStreamReader.
        Args:
            source: A readable byte stream (pipe, socket file, file opened in binary mode...).
            encoding: The name of the encoding used to decode the bytes. `None` means the platform default.
            errors: The codec error handler used when decoding, "strict" by default.
        Raises:
            UnsupportedEncodingError: If `encoding` is not a known codec.
            ValueError: If `errors` is not a registered error handler.
        """
        try:
            codecs.lookup_error(errors)
        except LookupError as e:
            raise ValueError(f"Unknown codec error handler '{errors}'") from e

        self.source = source
        self.encoding = resolve_encoding(encoding)
        self.errors = errors

    def read(self) -> Generator[str, None, None]:
        """
        Read the source one raw line at a time until EOF and yield decoded lines.
        The source is left open; closing it is the caller's business.
        Raises:
            OSError: If reading the source fails.
            UnicodeDecodeError: If the bytes cannot be decoded with the configured encoding.
        """
        decoder = codecs.getincrementaldecoder(self.encoding)(errors=self.errors)
        splitter = LineSplitter()

        for raw_line in iter(self.source.readline, b""):
            yield from splitter.feed(decoder.decode(raw_line))

        # Incomplete multi-byte sequences left in the decoder fail here in strict mode
        yield from splitter.feed(decoder.decode(b"", final=True))
        yield from splitter.finish()
