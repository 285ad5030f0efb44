"""
Module providing an incremental line splitter for decoded text chunks.
"""
import re

# "\r\n" must come first so that it is consumed as a single terminator
LINE_TERMINATOR_REGEX = re.compile(r"\r\n|\r|\n")


class LineSplitter:
    """
    Split text fed in arbitrary chunks into lines, stripping "\\n", "\\r" and "\\r\\n" terminators.
    """

    def __init__(self):
        self._pending = ""

    def feed(self, text: str) -> list[str]:
        """
        Add a chunk of text and return the lines completed by it.
        """
        data = self._pending + text
        # A trailing "\r" may be the first half of a "\r\n" split across two chunks
        if data.endswith("\r"):
            data, held_back = data[:-1], "\r"
        else:
            held_back = ""

        parts = LINE_TERMINATOR_REGEX.split(data)
        self._pending = parts.pop() + held_back
        return parts

    def finish(self) -> list[str]:
        """
        Flush the last line, which may not be terminated. Returns an empty list if nothing is pending.
        """
        pending, self._pending = self._pending, ""
        if not pending:
            return []
        # Only a lone "\r" can still be pending at the end of a terminated line
        parts = LINE_TERMINATOR_REGEX.split(pending)
        return parts[:-1] if parts[-1] == "" else parts
