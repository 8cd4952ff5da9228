"""
TLS support: the policy object handed to the socket layer, its builders,
and the explicit AUTH TLS / PBSZ / PROT upgrade of a control connection.
"""

import logging
import socket
import ssl
from typing import Optional

from ftpclient.core.errors import FTPError

logger = logging.getLogger(__name__)

CLIENT_CIPHERS = ":".join([
    "ECDHE-ECDSA-AES256-GCM-SHA384",
    "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-ECDSA-AES128-GCM-SHA256",
    "ECDHE-RSA-AES128-GCM-SHA256",
])

ACCEPTED_CBC_CIPHERS = ":".join([
    "ECDHE-ECDSA-AES256-SHA",
    "ECDHE-ECDSA-AES128-SHA",
    "ECDHE-RSA-AES256-SHA",
    "ECDHE-RSA-AES128-SHA",
    "AES256-SHA",
    "AES128-SHA",
])

DEFAULT_CIPHERS = CLIENT_CIPHERS + ":" + ACCEPTED_CBC_CIPHERS


class TLSPolicy:
    """
    Contexts used to encrypt the control and data connections.

    ``client_context`` performs every client-side handshake (control socket,
    passive data sockets). ``server_context`` is only needed in active mode,
    where the accepted data socket is wrapped as the TLS server side; it
    requires a certificate.
    """

    def __init__(self, client_context: ssl.SSLContext, server_context: Optional[ssl.SSLContext] = None):
        self.client_context = client_context
        self.server_context = server_context

    def wrap_client(self, sock: socket.socket, server_hostname: Optional[str] = None,
                    session: Optional[ssl.SSLSession] = None, do_handshake: bool = True) -> ssl.SSLSocket:
        return self.client_context.wrap_socket(
            sock,
            server_hostname=server_hostname,
            session=session,
            do_handshake_on_connect=do_handshake,
        )

    def wrap_server(self, sock: socket.socket) -> ssl.SSLSocket:
        if self.server_context is None:
            raise FTPError("TLS policy has no certificate for server-side handshakes")
        return self.server_context.wrap_socket(sock, server_side=True)


def _harden(context: ssl.SSLContext):
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.set_ciphers(DEFAULT_CIPHERS)


def new_tls_policy(verify: bool = True) -> TLSPolicy:
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    _harden(context)
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return TLSPolicy(context)


def new_tls_policy_with_key_pair(certfile: str, keyfile: str, verify: bool = True) -> TLSPolicy:
    policy = new_tls_policy(verify=verify)
    server_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    _harden(server_context)

    try:
        policy.client_context.load_cert_chain(certfile, keyfile)
        server_context.load_cert_chain(certfile, keyfile)
    except FileNotFoundError as e:
        raise FTPError(f"could not load X509 key(cert: {certfile!r}, key: {keyfile!r}): {e}") from e
    except (ssl.SSLError, OSError) as e:
        raise FTPError(f"error load X509 key(cert: {certfile!r}, key: {keyfile!r}): {e}") from e

    policy.server_context = server_context
    return policy


def upgrade_control_connection(session):
    """
    Explicit TLS: AUTH TLS (234), handshake over the open control socket,
    then PBSZ 0 and PROT P (200). From here on every data connection of the
    session is encrypted as well.
    """
    logger.info("Upgrading control connection to TLS")
    session.auth("TLS")
    session.conn.upgrade_tls(session.config.tls_policy)
    session.pbsz("0")
    session.prot("P")
    logger.info("✓ Control connection upgraded to TLS")
