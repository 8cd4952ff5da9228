import socket
import threading
from collections import deque
from types import SimpleNamespace

import pytest
from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import FTPServer

from ftpclient.core import Config, FTPSession, Logger
from ftpclient.core.errors import TransportError

FTP_USER = "user"
FTP_PASSWORD = "12345"


class ScriptedConnection:
    """
    Stand-in for ControlConnectionManager: replies are served from a queue
    and every command line is recorded. ``on_send`` maps a verb to a callback
    run right after that command is written.
    """

    def __init__(self, replies, host="127.0.0.1", peer=("127.0.0.1", 21),
                 local=("127.0.0.1", 0), family=socket.AF_INET):
        self.replies = deque(replies)
        self.sent = []
        self.timeouts = []
        self.host = host
        self.family = family
        self._peer = peer
        self._local = local
        self.is_tls = False
        self.tls_session = None
        self.upgraded_with = None
        self.closed = False
        self.on_send = {}

    def send_command(self, command, redacted=None):
        self.sent.append(command)
        hook = self.on_send.get(command.split(" ", 1)[0].upper())
        if hook is not None:
            hook(command)

    def receive_response(self, timeout=None):
        self.timeouts.append(timeout)
        if not self.replies:
            raise TransportError("Connection closed by peer")
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def upgrade_tls(self, tls_policy):
        self.upgraded_with = tls_policy
        self.is_tls = True

    def peer_address(self):
        return self._peer

    def local_address(self):
        return self._local

    def disconnect(self):
        self.closed = True


class ListLogger(Logger):
    def __init__(self):
        self.messages = []

    def log(self, message):
        self.messages.append(message)


@pytest.fixture
def make_session():
    """Builds an FTPSession already past the 220 greeting, driven by scripted replies."""
    def factory(*replies, config=None, **conn_kwargs):
        conn = ScriptedConnection(["220 Service ready", *replies], **conn_kwargs)
        session = FTPSession(config or Config()).open(conn)
        return session, conn
    return factory


@pytest.fixture
def fake_dial(monkeypatch):
    """
    Replaces the passive-mode dial with one end of a socketpair. The test
    gets the dialed address and the peer end to play the server's side.
    """
    from ftpclient.core import negotiation

    state = SimpleNamespace(address=None, client=None, server=None)

    def create_connection(address, timeout=None):
        state.address = address
        state.client, state.server = socket.socketpair()
        return state.client

    monkeypatch.setattr(negotiation.socket, "create_connection", create_connection)
    yield state
    for sock in (state.client, state.server):
        if sock is not None:
            sock.close()


@pytest.fixture
def ftp_root(tmp_path):
    root = tmp_path / "ftp_root"
    root.mkdir()
    return root


@pytest.fixture
def ftp_server(ftp_root):
    """A real pyftpdlib server on 127.0.0.1 serving ``ftp_root``."""
    authorizer = DummyAuthorizer()
    authorizer.add_user(FTP_USER, FTP_PASSWORD, str(ftp_root), perm="elradfmwMT")

    class Handler(FTPHandler):
        pass

    Handler.authorizer = authorizer
    server = FTPServer(("127.0.0.1", 0), Handler)
    host, port = server.socket.getsockname()[:2]

    stop = threading.Event()

    def serve():
        while not stop.is_set():
            server.serve_forever(timeout=0.05, blocking=False)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    try:
        yield SimpleNamespace(host=host, port=port, root=ftp_root, user=FTP_USER, password=FTP_PASSWORD)
    finally:
        stop.set()
        thread.join(timeout=5)
        server.close_all()
