import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

from ftpclient.core.errors import ParseError

logger = logging.getLogger(__name__)

# 227 Entering Passive Mode (h1,h2,h3,h4,p1,p2).
PASV_PATTERN = re.compile(r"(\d+),(\d+),(\d+),(\d+),(\d+),(\d+)")
# 229 Entering Extended Passive Mode (|||p|).
EPSV_PATTERN = re.compile(r"\|\|\|(\d+)\|")

RESPONSE_TYPES = {
    '1': 'preliminary',
    '2': 'success',
    '3': 'missing_info',
    '4': 'error',
    '5': 'error'
}


@dataclass(frozen=True)
class Reply:
    """One complete server reply: numeric code, message text and the raw lines."""
    code: int
    message: str
    raw: str = ""

    @property
    def type(self) -> str:
        return RESPONSE_TYPES.get(str(self.code)[0], 'unknown')

    def __str__(self):
        return f"{self.code} {self.message}"


class Parser:

    def parse_data(self, data: str) -> Reply:
        """
        Parses a raw reply (one line, or a RFC 959 multi-line block) into a Reply.

        Multi-line replies start with ``xyz-`` and end with a line ``xyz text``;
        the code prefix is stripped from the first and last lines and from any
        intermediate line that repeats it.
        """
        lines = data.rstrip("\r\n").replace("\r\n", "\n").split("\n")
        first = lines[0]

        code = first[:3]
        if len(first) < 3 or not code.isdigit():
            logger.error(f"Invalid FTP response format: {data!r}")
            raise ParseError(f"Invalid FTP response format: {data!r}")

        if len(first) > 3 and first[3] not in (' ', '-'):
            logger.error(f"Invalid FTP response separator: {first!r}")
            raise ParseError(f"Invalid FTP response format: {data!r}")

        message_parts = [first[4:]]
        for line in lines[1:]:
            if line[:3] == code and line[3:4] in (' ', '-'):
                message_parts.append(line[4:])
            else:
                message_parts.append(line)

        reply = Reply(int(code), "\n".join(message_parts), data)
        logger.debug(f"Parsed response: code={reply.code}, type={reply.type}, message={reply.message[:50]}")
        return reply

    def parse_pasv_response(self, message: str) -> Tuple[str, int]:
        """Parses the PASV response to extract IP and port."""
        match = PASV_PATTERN.search(message)
        if match is None:
            logger.error(f"Failed to parse PASV response: {message}")
            raise ParseError("No matching pattern for message: " + message)

        numbers = [int(n) for n in match.groups()]
        if any(n > 255 for n in numbers):
            raise ParseError("PASV field out of range in message: " + message)

        ip = '.'.join(str(n) for n in numbers[:4])
        port = (numbers[4] << 8) + numbers[5]
        logger.debug(f"PASV parsed: {ip}:{port}")
        return ip, port

    def parse_epsv_response(self, message: str) -> int:
        """Parses the EPSV response; the host is always the control peer."""
        match = EPSV_PATTERN.search(message)
        if match is None:
            logger.error(f"Failed to parse EPSV response: {message}")
            raise ParseError("No matching pattern for message: " + message)

        port = int(match.group(1))
        if port > 65535:
            raise ParseError("EPSV port out of range in message: " + message)
        logger.debug(f"EPSV parsed: port {port}")
        return port

    def parse_quoted_path(self, message: str) -> str:
        """Returns the text between the first and the last double quote (257 replies)."""
        start = message.find('"')
        end = message.rfind('"')
        if start == -1 or end == start:
            raise ParseError("Unsupported response format: " + message)
        return message[start + 1:end]

    def parse_feat(self, message: str) -> List[str]:
        """Feature lines of a 211 FEAT reply, without the header and footer."""
        lines = message.split("\n")
        return [line.strip() for line in lines[1:-1] if line.strip()]


_DEFAULT_PARSER = Parser()


def decode227(message: str) -> Tuple[str, int]:
    return _DEFAULT_PARSER.parse_pasv_response(message)


def decode229(message: str) -> int:
    return _DEFAULT_PARSER.parse_epsv_response(message)


def decode257(message: str) -> str:
    return _DEFAULT_PARSER.parse_quoted_path(message)
