import socket
import ssl
import logging
from typing import Optional, Tuple

from ftpclient.core.errors import ParseError, TransportError

logger = logging.getLogger(__name__)

MAX_LINE = 8192


class ControlConnectionManager:
    def __init__(self, host: str, port: int, timeout: float = 10.0, read_write_timeout: float = 120.0):
        self.host = host
        self.port = port
        self.socket: Optional[socket.socket] = None
        self.timeout = timeout
        self.read_write_timeout = read_write_timeout
        self._reader = None

    def connect(self, tls_policy=None):
        """Opens the control socket. With a TLS policy the handshake happens right away (implicit TLS)."""
        if self.socket is not None:
            raise RuntimeError("Connection already established.")
        try:
            logger.info(f"Connecting to {self.host}:{self.port} (timeout={self.timeout}s)")
            sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
            if tls_policy is not None:
                try:
                    sock = tls_policy.wrap_client(sock, server_hostname=self.host)
                except OSError:
                    sock.close()
                    raise
            sock.settimeout(self.read_write_timeout)
            logger.info(f"✓ Connected to {self.host}:{self.port}")
        except OSError as e:
            logger.error(f"✗ Failed to connect to {self.host}:{self.port} - {e}")
            raise TransportError(f"Failed to connect to {self.host}:{self.port} - {e}") from e
        self._attach(sock)

    def _attach(self, sock: socket.socket):
        self.socket = sock
        self._reader = sock.makefile("rb")

    def upgrade_tls(self, tls_policy):
        """Replaces the plaintext socket and reader with TLS-wrapped ones (after AUTH TLS)."""
        self._require_socket()
        self._reader.close()
        try:
            tls_sock = tls_policy.wrap_client(self.socket, server_hostname=self.host)
            tls_sock.settimeout(self.read_write_timeout)
        except OSError as e:
            logger.error(f"✗ TLS handshake with {self.host}:{self.port} failed - {e}")
            raise TransportError(f"TLS handshake failed - {e}") from e
        self._attach(tls_sock)

    def disconnect(self):
        if self.socket:
            try:
                logger.info(f"Closing connection to {self.host}:{self.port}")
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            try:
                self._reader.close()
                self.socket.close()
            except OSError as e:
                raise TransportError(f"Failed to close connection - {e}") from e
            finally:
                self.socket = None
                self._reader = None
            logger.info(f"✓ Disconnected from {self.host}:{self.port}")

    def send_command(self, command: str, redacted: Optional[str] = None):
        """Writes one CRLF-terminated command line. ``redacted`` replaces the text in the log."""
        self._require_socket()
        if not command.endswith('\r\n'):
            command += '\r\n'
        logger.debug(f"→ SEND: {redacted or command.strip()}")
        try:
            self.socket.sendall(command.encode('utf-8'))
        except OSError as e:
            raise TransportError(f"Failed to send command - {e}") from e

    def receive_response(self, timeout: Optional[float] = None) -> str:
        """
        Reads one complete reply. A first line ``xyz-`` opens a multi-line
        reply that runs until a line starting with ``xyz ``.
        """
        self._require_socket()
        if timeout is not None:
            self.socket.settimeout(timeout)
        try:
            lines = [self._readline()]
            first = lines[0]
            if first[3:4] == '-':
                code = first[:3]
                while True:
                    line = self._readline()
                    lines.append(line)
                    if line[:3] == code and line[3:4] == ' ':
                        break
        finally:
            if timeout is not None and self.socket is not None:
                self.socket.settimeout(self.read_write_timeout)

        response = '\r\n'.join(lines)
        logger.debug(f"← RECV: {response}")
        return response

    def _readline(self) -> str:
        try:
            line = self._reader.readline(MAX_LINE + 1)
        except OSError as e:
            raise TransportError(f"Failed to read response - {e}") from e
        if not line:
            raise TransportError(f"Connection closed by {self.host}:{self.port}")
        if len(line) > MAX_LINE:
            raise ParseError("Response line too long")
        return line.decode('utf-8', errors='replace').rstrip('\r\n')

    def _require_socket(self):
        if self.socket is None:
            raise RuntimeError("No connection established.")

    # --------------- address / TLS state --------------------------
    @property
    def family(self) -> int:
        self._require_socket()
        return self.socket.family

    def peer_address(self) -> Tuple[str, int]:
        self._require_socket()
        return self.socket.getpeername()[:2]

    def local_address(self) -> Tuple[str, int]:
        self._require_socket()
        return self.socket.getsockname()[:2]

    @property
    def is_tls(self) -> bool:
        return isinstance(self.socket, ssl.SSLSocket)

    @property
    def tls_session(self) -> Optional[ssl.SSLSession]:
        return getattr(self.socket, "session", None) if self.is_tls else None
