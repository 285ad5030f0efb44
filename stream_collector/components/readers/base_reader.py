"""
Module providing the reader interface consumed by the collectors.

A reader turns an input source into decoded lines and nothing more: it never owns the
source, so closing it and running the read loop on a thread are left to `LineCollector`.
"""
from abc import ABC, abstractmethod
from typing import Generator


class BaseReader(ABC):
    @abstractmethod
    def read(self) -> Generator[str, None, None]:
        """
        Read the source until EOF, one line at a time.
        Returns:
            Generator[str, None, None]: The decoded lines in source order, line terminators stripped.
            Read and decode errors propagate to the caller as they occur.
        """
        raise NotImplementedError()
