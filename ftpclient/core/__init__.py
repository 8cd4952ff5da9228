"""
Core FTP Client logic.
Includes the control session, data connection negotiation, reply and listing parsers.
"""

from .codes import StatusCode
from .config import Config
from .connection import ControlConnectionManager
from .data_connection import DataConnection
from .errors import (
    FTPError,
    LoginError,
    ParseError,
    ProtocolError,
    ShortWriteError,
    TransportError,
    UnknownFormatError,
)
from .listing import FileEntry, parse_line
from .logger import DefaultLogger, Logger
from .negotiation import DataConnectionNegotiator
from .parser import Parser, Reply
from .session import FTPSession, connect
from .tls import TLSPolicy, new_tls_policy, new_tls_policy_with_key_pair
from .transfer import copy_stream, server_to_server

__all__ = [
    "StatusCode",
    "Config",
    "ControlConnectionManager",
    "DataConnection",
    "DataConnectionNegotiator",
    "FTPError",
    "LoginError",
    "ParseError",
    "ProtocolError",
    "ShortWriteError",
    "TransportError",
    "UnknownFormatError",
    "FileEntry",
    "parse_line",
    "DefaultLogger",
    "Logger",
    "Parser",
    "Reply",
    "FTPSession",
    "connect",
    "TLSPolicy",
    "new_tls_policy",
    "new_tls_policy_with_key_pair",
    "copy_stream",
    "server_to_server",
]
