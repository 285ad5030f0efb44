"""
Module providing helpers to validate encoding names before any byte is read.
"""
import codecs
import locale

from stream_collector.components.errors import UnsupportedEncodingError


def default_encoding() -> str:
    """
    Return the platform default decoding (the locale preferred encoding).
    """
    return codecs.lookup(locale.getpreferredencoding(False)).name


def resolve_encoding(name: str | None) -> str:
    """
    Resolve an encoding name to its canonical codec name.
    Args:
        name: an encoding name such as "UTF-8" or "latin-1", or `None` for the platform default
    Returns:
        the canonical name of the codec, e.g. "utf-8" or "iso8859-1"
    Raises:
        UnsupportedEncodingError: if the codec registry does not know `name`
    """
    if name is None:
        return default_encoding()
    try:
        return codecs.lookup(name).name
    except LookupError as e:
        raise UnsupportedEncodingError(name) from e
