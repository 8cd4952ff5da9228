"""
Command dispatch for the interactive console.

Maps a typed line such as ``cwd /pub`` or ``retr notes.txt /tmp/notes.txt``
onto FTPSession methods. Kept free of Streamlit so it can be unit tested.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ftpclient.core import FTPError, FTPSession
from ftpclient.ui.levenstein import get_suggestion

logger = logging.getLogger(__name__)


@dataclass
class ConsoleResult:
    ok: bool
    message: str
    data: Any = None


class UsageError(Exception):
    pass


def _require(args: List[str], count: int, usage: str):
    if len(args) < count:
        raise UsageError(f"Usage: {usage}")


def _passive(session: FTPSession, args: List[str]) -> ConsoleResult:
    if args:
        session.set_passive(args[0].lower() in ("on", "true", "1", "yes"))
    else:
        session.set_passive(not session.passive)
    return ConsoleResult(True, f"Passive mode {'on' if session.passive else 'off'}")


def _retr(session: FTPSession, args: List[str], download_dir: str) -> ConsoleResult:
    _require(args, 1, "RETR remote_filename [local_path]")
    remote = args[0]
    local = args[1] if len(args) > 1 else os.path.join(download_dir, os.path.basename(remote))
    size = session.retr_file(remote, local)
    return ConsoleResult(True, f"RETR finished: {local} ({size} bytes)", local)


def _stor(session: FTPSession, args: List[str]) -> ConsoleResult:
    _require(args, 1, "STOR local_path [remote_filename]")
    local = args[0]
    remote = args[1] if len(args) > 1 else os.path.basename(local)
    size = session.stor_file(local, remote)
    return ConsoleResult(True, f"STOR finished: {remote} ({size} bytes)", remote)


def _dir(session: FTPSession, args: List[str]) -> ConsoleResult:
    entries = session.dir(*args)
    lines = [f"{'d' if e.is_dir else '-'} {e.size:>12} {e.mtime:%Y-%m-%d %H:%M} {e.name}" for e in entries]
    return ConsoleResult(True, f"{len(entries)} entries", "\n".join(lines))


def _simple(action: Callable[[FTPSession, List[str]], Any], usage: str = "", nargs: int = 0):
    def run(session: FTPSession, args: List[str]) -> ConsoleResult:
        _require(args, nargs, usage)
        value = action(session, args)
        if value is None:
            return ConsoleResult(True, "OK")
        return ConsoleResult(True, str(value), value)
    return run


HANDLERS: Dict[str, Callable[[FTPSession, List[str]], ConsoleResult]] = {
    "pwd": _simple(lambda s, a: s.pwd()),
    "cwd": _simple(lambda s, a: s.cwd(a[0]), "CWD path", 1),
    "cdup": _simple(lambda s, a: s.cdup()),
    "mkd": _simple(lambda s, a: s.mkd(a[0]), "MKD path", 1),
    "rmd": _simple(lambda s, a: s.rmd(a[0]), "RMD path", 1),
    "dele": _simple(lambda s, a: s.delete(a[0]), "DELE path", 1),
    "rename": _simple(lambda s, a: s.rename(a[0], a[1]), "RENAME from to", 2),
    "size": _simple(lambda s, a: s.size(a[0]), "SIZE path", 1),
    "type": _simple(lambda s, a: s.type(a[0]), "TYPE A|I", 1),
    "rest": _simple(lambda s, a: s.rest(int(a[0])), "REST offset", 1),
    "opts": _simple(lambda s, a: s.opts(" ".join(a)), "OPTS option", 1),
    "noop": _simple(lambda s, a: s.noop()),
    "syst": _simple(lambda s, a: s.syst()),
    "rein": _simple(lambda s, a: s.rein()),
    "abor": _simple(lambda s, a: s.abort()),
    "feat": _simple(lambda s, a: "\n".join(s.feat())),
    "list": _simple(lambda s, a: "\n".join(s.list(*a))),
    "nlst": _simple(lambda s, a: "\n".join(s.nlst(*a))),
    "dir": _dir,
    "passive": _passive,
    "stor": _stor,
    "quit": _simple(lambda s, a: s.quit()),
}


def run_command(session: FTPSession, line: str, download_dir: str = "/tmp") -> ConsoleResult:
    """Runs one console line; FTP failures come back as a failed ConsoleResult."""
    try:
        parts = shlex.split(line)
    except ValueError as e:
        return ConsoleResult(False, f"Syntax error: {e}")
    if not parts:
        return ConsoleResult(False, "Empty command")

    verb, args = parts[0].lower(), parts[1:]
    try:
        if verb == "retr":
            return _retr(session, args, download_dir)
        handler = HANDLERS.get(verb)
        if handler is None:
            suggestion = get_suggestion(verb)
            hint = f" Try with {suggestion}" if suggestion else ""
            return ConsoleResult(False, f"Unknown command: {verb}.{hint}")
        return handler(session, args)
    except UsageError as e:
        return ConsoleResult(False, str(e))
    except (FTPError, OSError, ValueError) as e:
        logger.error(f"[UI] {verb.upper()} failed: {e}")
        return ConsoleResult(False, f"Error: {e}")
