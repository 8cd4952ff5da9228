"""
Directory listing parser.

Turns one line of a LIST reply into a ``FileEntry``. Two dialects are
understood, tried in a fixed order: Unix ``ls -l`` lines and DOS/IIS lines.
A parser that does not recognise a line raises ``UnknownFormatError`` so the
next one is tried; any other ``ParseError`` is final.
"""

import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Tuple

from ftpclient.core.errors import ParseError, UnknownFormatError

_MONTHS = {
    name: number for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun",
         "jul", "aug", "sep", "oct", "nov", "dec"), start=1)
}

_TYPE_BITS = {
    'd': stat.S_IFDIR,
    'l': stat.S_IFLNK,
    'b': stat.S_IFBLK,
    'c': stat.S_IFCHR,
    'p': stat.S_IFIFO,
    '=': stat.S_IFIFO,
    's': stat.S_IFSOCK,
}

_DOS_LAYOUTS = ("%m-%d-%y  %I:%M%p", "%Y-%m-%d  %H:%M")
_DOS_STAMP_WIDTH = 17


@dataclass(frozen=True)
class FileEntry:
    name: str
    size: int
    mode: int
    mtime: datetime
    raw: str

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "size": self.size,
            "dir": self.is_dir,
            "mod_time": self.mtime.isoformat(),
        }


def _parse_unix_datetime(month: str, day: str, year_or_time: str) -> datetime:
    month_number = _MONTHS.get(month.lower())
    if month_number is None:
        raise ParseError(f"Invalid month in time string: {month!r}")

    if ":" in year_or_time:
        year = datetime.now(timezone.utc).year
        hour, _, minute = year_or_time.partition(":")
    else:
        if len(year_or_time) != 4 or not year_or_time.isdecimal():
            raise ParseError("Invalid year format in time string")
        year, hour, minute = int(year_or_time), "0", "0"

    try:
        return datetime(int(year), month_number, int(day), int(hour), int(minute),
                        tzinfo=timezone.utc)
    except ValueError as e:
        raise ParseError(f"Invalid date in listing: {month} {day} {year_or_time}") from e


def parse_unix_line(line: str) -> FileEntry:
    """``drwxr-xr-x 2 user group 4096 Jan 15 2023 mydir``"""
    fields = line.split()
    if len(fields) < 9 or len(fields[0]) < 10:
        raise UnknownFormatError(line)

    perms = fields[0]
    mode = _TYPE_BITS.get(perms[0], stat.S_IFREG)

    # rwx por cada grupo: owner, group, other
    for i in range(3):
        shift = 3 * (2 - i)
        if perms[i * 3 + 1] == 'r':
            mode |= 0o4 << shift
        if perms[i * 3 + 2] == 'w':
            mode |= 0o2 << shift
        if perms[i * 3 + 3] in ('x', 's'):
            mode |= 0o1 << shift

    if not fields[4].isdecimal():
        raise ParseError(f"Invalid size in listing line: {fields[4]!r}")
    size = int(fields[4])

    mtime = _parse_unix_datetime(*fields[5:8])
    name = " ".join(fields[8:])

    return FileEntry(name=name, size=size, mode=mode, mtime=mtime, raw=line)


def _parse_dos_datetime(value: str) -> datetime:
    for layout in _DOS_LAYOUTS:
        try:
            return datetime.strptime(value, layout).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise UnknownFormatError(value)


def parse_dos_line(line: str) -> FileEntry:
    """``01-15-23  03:04PM <DIR>          mydir`` or ``2023-01-15  15:04       1234 afile.txt``"""
    if len(line) < _DOS_STAMP_WIDTH:
        raise UnknownFormatError(line)
    mtime = _parse_dos_datetime(line[:_DOS_STAMP_WIDTH])

    size = 0
    mode = stat.S_IFREG
    value = line[_DOS_STAMP_WIDTH:].lstrip(" ")
    if value.startswith("<DIR>"):
        mode = stat.S_IFDIR
        value = value[len("<DIR>"):]
    else:
        token, sep, rest = value.partition(" ")
        if not sep or not token.isdecimal():
            raise ParseError(f"Invalid size in listing line: {token!r}")
        size = int(token)
        value = rest

    return FileEntry(name=value.lstrip(" "), size=size, mode=mode, mtime=mtime, raw=line)


LINE_PARSERS: Tuple[Callable[[str], FileEntry], ...] = (
    parse_unix_line,
    parse_dos_line,
)


def parse_line(line: str) -> FileEntry:
    for parse in LINE_PARSERS:
        try:
            return parse(line)
        except UnknownFormatError:
            continue
    raise UnknownFormatError(line)
