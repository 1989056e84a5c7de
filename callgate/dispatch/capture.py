"""
Output capture for the dispatch lifecycle.

An OutputCapture is both:
1. An explicit writer that handlers can be given (Handler.out)
2. The ambient sys.stdout while its scope is open, so plain print() lands
   in the same buffer

Scopes nest: entering pushes this buffer as sys.stdout, leaving restores
whatever stream was active before, on every exit path. Output written
straight to the real stream (sys.__stdout__) bypasses the buffer and is
left alone.
"""

import io
import sys
from contextlib import redirect_stdout
from typing import Optional


class OutputCapture:
    """
    A single capture scope.

    Usage:
        with OutputCapture() as capture:
            print("hello")
            capture.write("world")
        capture.getvalue()  # "hello\\nworld"
    """

    def __init__(self) -> None:
        self._buffer = io.StringIO()
        self._redirect: Optional[redirect_stdout] = None
        self._text: Optional[str] = None

    @property
    def active(self) -> bool:
        """True while the scope is open."""
        return self._redirect is not None

    @property
    def closed(self) -> bool:
        """True once the scope has ended."""
        return self._text is not None

    def __enter__(self) -> "OutputCapture":
        if self.active or self.closed:
            raise RuntimeError("OutputCapture scopes cannot be re-entered")
        self._redirect = redirect_stdout(self._buffer)
        self._redirect.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        redirect, self._redirect = self._redirect, None
        try:
            if redirect is not None:
                redirect.__exit__(exc_type, exc, tb)
        finally:
            self._text = self._buffer.getvalue()
            self._buffer.close()

    def write(self, text: str) -> int:
        """
        Write text to the capture.

        After the scope has ended the text goes to the live sys.stdout
        instead and is not part of the captured output.
        """
        if self.closed:
            return sys.stdout.write(text)
        return self._buffer.write(text)

    def flush(self) -> None:
        if self.closed:
            sys.stdout.flush()

    def getvalue(self) -> str:
        """Everything captured so far (or in total, once closed)."""
        if self._text is not None:
            return self._text
        return self._buffer.getvalue()
