import socket
import logging
from typing import Iterator, Optional

from ftpclient.core.codes import TRANSFER_COMPLETE
from ftpclient.core.errors import FTPError, TransportError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32 * 1024


class DataConnection:
    """
    Maneja una conexión de datos abierta para un comando de transferencia.

    Lee y escribe sobre el socket auxiliar con el timeout de la sesión; al
    cerrarse consume la respuesta final (226) en la conexión de control.
    """

    def __init__(self, sock: socket.socket, session):
        self.data_socket: Optional[socket.socket] = sock
        self.session = session
        self.data_socket.settimeout(session.config.read_write_timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self.data_socket is None

    def read(self, size: int = CHUNK_SIZE) -> bytes:
        """Reads up to ``size`` bytes; returns b"" at end of stream."""
        self._require_open()
        try:
            return self.data_socket.recv(size)
        except OSError as e:
            raise TransportError(f"Failed to read data connection - {e}") from e

    def write(self, data: bytes) -> int:
        self._require_open()
        try:
            self.data_socket.sendall(data)
        except OSError as e:
            raise TransportError(f"Failed to write data connection - {e}") from e
        return len(data)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read()
            if not chunk:
                break
            yield chunk

    def iter_lines(self, encoding: str = 'utf-8') -> Iterator[str]:
        """Yields the stream line by line, without the CRLF / LF terminator."""
        buffer = b""
        for chunk in self:
            buffer += chunk
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                yield line.rstrip(b"\r").decode(encoding, errors='replace')
        if buffer:
            yield buffer.rstrip(b"\r").decode(encoding, errors='replace')

    def close(self):
        """
        Cierra el socket de datos y espera la respuesta final del servidor.

        If both steps fail, the socket error is raised with the reply error
        chained as its cause.
        """
        if self.data_socket is None:
            return
        sock, self.data_socket = self.data_socket, None

        close_error = None
        try:
            sock.close()
        except OSError as e:
            close_error = TransportError(f"Failed to close data connection - {e}")
            close_error.__cause__ = e

        try:
            self.session.get_response(TRANSFER_COMPLETE)
        except FTPError as reply_error:
            if close_error is not None:
                raise close_error from reply_error
            raise

        if close_error is not None:
            raise close_error
        logger.debug("[DATA] Data connection closed")

    def _require_open(self):
        if self.data_socket is None:
            raise RuntimeError("Data connection is closed.")
