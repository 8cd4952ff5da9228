"""
Exception hierarchy raised by the FTP client core.

Every error is propagated to the caller; the session never retries or
reconnects on its own.
"""


class FTPError(Exception):
    """Base class for every error raised by the client."""


class TransportError(FTPError):
    """A socket dial, read, write or close failed.

    The underlying ``OSError`` is always chained as ``__cause__``.
    """


class ProtocolError(FTPError):
    """The server answered with a reply code the command does not accept."""

    def __init__(self, code: int, message: str):
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self):
        return f"{self.code} {self.message}"


class LoginError(ProtocolError):
    """USER/PASS was not accepted by the server."""


class ParseError(FTPError, ValueError):
    """A reply payload or a listing line could not be decoded."""


class UnknownFormatError(ParseError):
    """The listing line does not look like any supported dialect."""

    def __init__(self, line: str = ""):
        super().__init__(f"Unknown format: {line!r}")
        self.line = line


class ShortWriteError(FTPError):
    """A stream copy wrote fewer bytes than it read."""

    def __init__(self, expected: int, written: int):
        super().__init__(f"short write: {written} of {expected} bytes")
        self.expected = expected
        self.written = written
