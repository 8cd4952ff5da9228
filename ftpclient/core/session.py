import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ftpclient.core.codes import StatusCode, TRANSFER_STARTING
from ftpclient.core.config import Config
from ftpclient.core.connection import ControlConnectionManager
from ftpclient.core.data_connection import DataConnection
from ftpclient.core.errors import FTPError, LoginError, ParseError, ProtocolError
from ftpclient.core.listing import FileEntry, parse_line
from ftpclient.core.negotiation import DataConnectionNegotiator, is_ipv4
from ftpclient.core.parser import Parser, Reply
from ftpclient.core.tls import upgrade_control_connection
from ftpclient.core.transfer import copy_stream

logger = logging.getLogger(__name__)

Expect = Union[None, int, Sequence[int]]

DEFAULT_PORT = 21


class FTPSession:
    """
    One control connection to an FTP server.

    Commands run strictly one at a time: each reply is read before the next
    command is written. A transfer's DataConnection must be closed (which
    reads the final 226) before any other command is issued.
    """

    def __init__(self, config: Optional[Config] = None, parser: Optional[Parser] = None):
        self.config = config or Config()
        self.parser = parser or Parser()
        self.passive = self.config.passive
        self.conn: Optional[ControlConnectionManager] = None
        self.negotiator = DataConnectionNegotiator(self)
        # history as list of dicts: {"time":..., "command":..., "raw":..., "parsed":..., "error":bool}
        self.history = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.quit()

    # ---------------- connection lifecycle ----------------
    def connect(self, host: str, port: int = DEFAULT_PORT, timeout: Optional[float] = None) -> "FTPSession":
        """Dials the server (TLS from the start if implicit TLS is configured) and reads the 220 greeting."""
        conn = ControlConnectionManager(
            host, port,
            timeout=timeout if timeout is not None else self.config.read_write_timeout,
            read_write_timeout=self.config.read_write_timeout,
        )
        implicit_policy = self.config.tls_policy if self.config.tls_implicit else None
        conn.connect(tls_policy=implicit_policy)
        return self.open(conn)

    def open(self, conn) -> "FTPSession":
        """Adopts an already connected control connection and requires the greeting."""
        self.conn = conn
        try:
            self.get_response(StatusCode.SERVICE_READY_FOR_NEW_USER)
        except FTPError:
            self.conn = None
            try:
                conn.disconnect()
            except FTPError as e:
                logger.warning(f"Disconnect after rejected greeting failed: {e}")
            raise
        return self

    def login(self, user: str, password: str):
        if self.config.tls_policy is not None and not self.config.tls_implicit and not self.conn.is_tls:
            upgrade_control_connection(self)

        reply = self.send_cmd(None, f"USER {user}")
        if reply.code != StatusCode.USER_NAME_OK:
            raise LoginError(reply.code, reply.message)

        reply = self.send_cmd(None, f"PASS {password}")
        if reply.code != StatusCode.USER_LOGGED_IN:
            raise LoginError(reply.code, reply.message)
        logger.info(f"✓ Logged in as {user}")

    def quit(self):
        """Sends QUIT (errors ignored) and always closes the control socket."""
        if self.conn is None:
            return
        try:
            self.send_cmd(None, "QUIT")
        except FTPError as e:
            logger.debug(f"QUIT failed, closing anyway: {e}")
        conn, self.conn = self.conn, None
        conn.disconnect()

    def set_passive(self, passive: bool):
        self.passive = passive

    # ---------------- request / reply ----------------
    def send_cmd(self, expect: Expect, command: str) -> Reply:
        """Sends one command line and returns its reply, checked against ``expect`` (None = any)."""
        if self.conn is None:
            raise RuntimeError("No connection established.")
        redacted = "PASS ***" if command[:4].upper() == "PASS" else None
        self._trace(redacted or command)
        self.conn.send_command(command, redacted=redacted)
        return self.get_response(expect, command=redacted or command)

    def get_response(self, expect: Expect = None, timeout: Optional[float] = None,
                     command: Optional[str] = None) -> Reply:
        """Reads one reply. ``timeout`` overrides the read timeout for this read only."""
        if self.conn is None:
            raise RuntimeError("No connection established.")
        raw = self.conn.receive_response(timeout=timeout)
        reply = self.parser.parse_data(raw)
        self._trace(f"{reply.code} {reply.message}")

        accepted = self._accepts(expect, reply.code)
        self.history.append({
            "time": datetime.now(timezone.utc),
            "command": command,
            "raw": raw,
            "parsed": reply,
            "error": not accepted or reply.type in ("error", "unknown")
        })
        if not accepted:
            raise ProtocolError(reply.code, reply.message)
        return reply

    @staticmethod
    def _accepts(expect: Expect, code: int) -> bool:
        if expect is None:
            return True
        if isinstance(expect, int):
            return code == expect
        return code in expect

    def _trace(self, message: str):
        if self.config.logger is not None:
            self.config.logger.log(message)

    # Comandos estandar, que no requieren conexion de datos
    def type(self, param: str):
        self.send_cmd(StatusCode.COMMAND_OKAY, f"TYPE {param}")

    def cwd(self, path: str):
        self.send_cmd(StatusCode.ACTION_OK, f"CWD {path}")

    def cdup(self):
        self.send_cmd(StatusCode.ACTION_OK, "CDUP")

    def pwd(self) -> str:
        reply = self.send_cmd(StatusCode.PATH_CREATED, "PWD")
        return self.parser.parse_quoted_path(reply.message)

    def rename(self, from_path: str, to_path: str):
        self.send_cmd(StatusCode.ACTION_PENDING, f"RNFR {from_path}")
        self.send_cmd(StatusCode.ACTION_OK, f"RNTO {to_path}")

    def delete(self, path: str):
        self.send_cmd((StatusCode.ACTION_OK, StatusCode.COMMAND_OKAY), f"DELE {path}")

    def mkd(self, path: str) -> str:
        reply = self.send_cmd(StatusCode.PATH_CREATED, f"MKD {path}")
        return self.parser.parse_quoted_path(reply.message)

    def rmd(self, path: str):
        self.send_cmd(StatusCode.ACTION_OK, f"RMD {path}")

    def noop(self):
        self.send_cmd(StatusCode.COMMAND_OKAY, "NOOP")

    def rest(self, offset: int):
        self.send_cmd(StatusCode.ACTION_PENDING, f"REST {offset}")

    def rein(self):
        self.send_cmd(StatusCode.SERVICE_READY_FOR_NEW_USER, "REIN")

    def abort(self):
        self.send_cmd((StatusCode.DATA_CONNECTION_OPEN, StatusCode.CLOSING_DATA_CONNECTION), "ABOR")

    def syst(self) -> str:
        return self.send_cmd(StatusCode.SYSTEM_TYPE, "SYST").message

    def size(self, filename: str) -> int:
        reply = self.send_cmd(StatusCode.FILE_STATUS, f"SIZE {filename}")
        value = reply.message.strip()
        if not value.isdecimal():
            raise ParseError(f"Invalid SIZE reply: {reply.message!r}")
        return int(value)

    def feat(self) -> List[str]:
        reply = self.send_cmd(StatusCode.SYSTEM_STATUS, "FEAT")
        return self.parser.parse_feat(reply.message)

    def opts(self, param: str):
        self.send_cmd(StatusCode.COMMAND_OKAY, f"OPTS {param}")

    def auth(self, param: str):
        self.send_cmd(StatusCode.AUTH_OKAY, f"AUTH {param}")

    def pbsz(self, param: str):
        self.send_cmd(StatusCode.COMMAND_OKAY, f"PBSZ {param}")

    def prot(self, param: str):
        self.send_cmd(StatusCode.COMMAND_OKAY, f"PROT {param}")

    # Direcciones de la conexion de datos
    def pasv(self) -> Tuple[str, int]:
        reply = self.send_cmd(StatusCode.ENTERING_PASSIVE_MODE, "PASV")
        return self.parser.parse_pasv_response(reply.message)

    def epsv(self) -> int:
        reply = self.send_cmd(StatusCode.ENTERING_EXTENDED_PASSIVE_MODE, "EPSV")
        return self.parser.parse_epsv_response(reply.message)

    def port(self, host: str, port: int):
        param = ",".join(host.split(".") + [str(port // 256), str(port % 256)])
        self.send_cmd(StatusCode.COMMAND_OKAY, f"PORT {param}")

    def eprt(self, host: str, port: int):
        family = 1 if is_ipv4(host) else 2
        self.send_cmd(StatusCode.COMMAND_OKAY, f"EPRT |{family}|{host}|{port}|")

    # Comandos de transferencia sin conexion de datos propia (FXP)
    def retr(self, path: str):
        self.send_cmd(TRANSFER_STARTING, f"RETR {path}")

    def stor(self, path: str):
        self.send_cmd(TRANSFER_STARTING, f"STOR {path}")

    # Comandos que requieren conexion de datos
    def transfer_request(self, command: str) -> DataConnection:
        """Negotiates a data connection for ``command``; close the result to finish the transfer."""
        sock = self.negotiator.open(command)
        return DataConnection(sock, self)

    def nlst_request(self, *args: str) -> DataConnection:
        return self.transfer_request(f"NLST {' '.join(args)}".strip())

    def list_request(self, *args: str) -> DataConnection:
        return self.transfer_request(f"LIST {' '.join(args)}".strip())

    def retr_request(self, path: str) -> DataConnection:
        return self.transfer_request(f"RETR {path}")

    def stor_request(self, path: str) -> DataConnection:
        return self.transfer_request(f"STOR {path}")

    def nlst(self, *args: str) -> List[str]:
        with self.nlst_request(*args) as reader:
            return [line for line in reader.iter_lines()]

    def list(self, *args: str) -> List[str]:
        with self.list_request(*args) as reader:
            return [line for line in reader.iter_lines()]

    def dir(self, *args: str) -> List[FileEntry]:
        """LIST parsed into FileEntry values; lines that fail to parse are skipped."""
        entries = []
        with self.list_request(*args) as reader:
            for line in reader.iter_lines():
                try:
                    entries.append(parse_line(line))
                except ParseError as e:
                    logger.debug(f"Skipping listing line {line!r}: {e}")
        return entries

    def retr_file(self, remote: str, local: str,
                  progress: Optional[Callable[[int], None]] = None) -> int:
        """
        Descarga un archivo desde el servidor y lo guarda en local.
        """
        with self.retr_request(remote) as reader:
            with open(local, 'wb') as f:
                total = copy_stream(reader, f, progress=progress)
        logger.info(f"[DATA] File downloaded to {local} ({total} bytes)")
        return total

    def stor_file(self, local: str, remote: str,
                  progress: Optional[Callable[[int], None]] = None) -> int:
        """
        Sube un archivo local al servidor.
        """
        with open(local, 'rb') as f:
            with self.stor_request(remote) as writer:
                total = copy_stream(f, writer, progress=progress)
        logger.info(f"[DATA] File uploaded from {local} ({total} bytes)")
        return total

    # Helpers for UI
    def get_history(self):
        """Return a copy of the history list."""
        return list(self.history)

    def clear_history(self):
        self.history.clear()


def connect(host: str, port: int = DEFAULT_PORT, timeout: Optional[float] = None,
            config: Optional[Config] = None) -> FTPSession:
    return FTPSession(config).connect(host, port, timeout)
