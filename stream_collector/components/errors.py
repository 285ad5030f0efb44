"""
Module providing the exceptions raised while collecting lines from a byte source.
"""


class StreamCollectorError(Exception):
    """
    Base class of all the errors raised by the stream_collector package.
    """


class UnsupportedEncodingError(StreamCollectorError, LookupError):
    """
    Raised when a collector or a reader is given an encoding name that the codec registry does not know.
    """

    def __init__(self, encoding: str):
        super().__init__(f"Unsupported encoding '{encoding}'")
        self.encoding = encoding


class StreamReadError(StreamCollectorError, OSError):
    """
    Raised when reading or decoding the byte source fails during the collection loop.
    The original `OSError` or `UnicodeDecodeError` is always available as `__cause__`.
    """
