"""
Data connection negotiation.

Opens the auxiliary socket of a transfer command in the mode the session is
configured for:

- passive: PASV (IPv4 control peer) or EPSV (otherwise), then dial the
  announced address before the transfer command is sent;
- active: listen on an ephemeral port of the control socket's local address,
  announce it with PORT (IPv4) or EPRT (otherwise), send the transfer
  command, then accept the server's connection.

Exactly one address command is issued per transfer and it always precedes
the transfer command.
"""

import concurrent.futures
import ipaddress
import logging
import socket
from typing import Optional, Tuple

from ftpclient.core.codes import TRANSFER_STARTING
from ftpclient.core.errors import FTPError, ProtocolError, TransportError

logger = logging.getLogger(__name__)


def is_ipv4(host: str) -> bool:
    """True for dotted IPv4 addresses and IPv4-mapped IPv6 addresses."""
    try:
        address = ipaddress.ip_address(host.split('%', 1)[0])
    except ValueError:
        return False
    if address.version == 4:
        return True
    return address.ipv4_mapped is not None


def as_ipv4(host: str) -> str:
    address = ipaddress.ip_address(host.split('%', 1)[0])
    if address.version == 6 and address.ipv4_mapped is not None:
        return str(address.ipv4_mapped)
    return str(address)


def start_listen(family: int, host: str, timeout: float) -> Optional[socket.socket]:
    """Listening socket on an ephemeral port; the accept timeout is set before it is handed out."""
    listener = None
    try:
        listener = socket.socket(family, socket.SOCK_STREAM)
        listener.bind((host, 0))
        listener.listen(1)
        listener.settimeout(timeout)
        return listener
    except OSError as e:
        logger.error(f"Unable to listen on {host}: {e}")
        if listener is not None:
            listener.close()
        return None


class DataConnectionNegotiator:

    def __init__(self, session):
        self.session = session

    @property
    def timeout(self) -> float:
        return self.session.config.read_write_timeout

    @property
    def tls_policy(self):
        return self.session.config.tls_policy

    def open(self, command: str) -> socket.socket:
        """Runs the whole negotiation for ``command`` and returns the connected data socket."""
        listener = None
        sock = None
        if self.session.passive:
            sock = self._dial_passive()
        else:
            listener = self._make_port()

        try:
            reply = self.session.send_cmd(None, command)
            if reply.code not in TRANSFER_STARTING:
                raise ProtocolError(reply.code, reply.message)

            if listener is not None:
                sock = self._accept(listener)
            elif self.tls_policy is not None:
                sock.do_handshake()
            return sock

        except OSError as e:
            self._discard(sock)
            raise TransportError(f"Data connection failed - {e}") from e
        except Exception:
            self._discard(sock)
            raise
        finally:
            if listener is not None:
                listener.close()

    # ---------------- Métodos Internos ----------------
    def _make_pasv(self) -> Tuple[str, int]:
        peer_host = self.session.conn.peer_address()[0]
        if is_ipv4(peer_host):
            return self.session.pasv()
        return peer_host, self.session.epsv()

    def _dial_passive(self) -> socket.socket:
        host, port = self._make_pasv()
        logger.debug(f"[DATA] Dialing {host}:{port}")
        try:
            sock = socket.create_connection((host, port), timeout=self.timeout)
        except OSError as e:
            logger.error(f"[DATA] Failed to connect to {host}:{port} - {e}")
            raise TransportError(f"Failed to connect to {host}:{port} - {e}") from e

        if self.tls_policy is None:
            return sock
        # el handshake se completa cuando el servidor acepta el comando de transferencia
        try:
            return self.tls_policy.wrap_client(
                sock,
                server_hostname=self.session.conn.host,
                session=self.session.conn.tls_session,
                do_handshake=False,
            )
        except (OSError, ValueError) as e:
            sock.close()
            raise TransportError(f"TLS wrap of data connection failed - {e}") from e

    def _make_port(self) -> socket.socket:
        local_host = self.session.conn.local_address()[0]
        family = self.session.conn.family

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as ex:
            future = ex.submit(start_listen, family, local_host, self.timeout)
            listener = future.result()
        if listener is None:
            raise TransportError("Unable to create listener")

        port = listener.getsockname()[1]
        logger.debug(f"[DATA] Listening on {local_host}:{port}")
        try:
            if is_ipv4(local_host):
                self.session.port(as_ipv4(local_host), port)
            else:
                self.session.eprt(local_host, port)
        except FTPError:
            listener.close()
            raise
        return listener

    def _accept(self, listener: socket.socket) -> socket.socket:
        conn, addr = listener.accept()
        logger.debug(f"[DATA] Accepted data connection from {addr}")
        conn.settimeout(self.timeout)
        if self.tls_policy is None:
            return conn
        try:
            return self.tls_policy.wrap_server(conn)
        except Exception:
            conn.close()
            raise

    @staticmethod
    def _discard(sock: Optional[socket.socket]):
        if sock is not None:
            try:
                sock.close()
            except OSError:
                logger.debug("[DATA] Error closing discarded data socket", exc_info=True)
