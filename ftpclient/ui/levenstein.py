from typing import List

# Verbos aceptados por la consola (ver ftpclient.ui.console)
COMMANDS = [
    "CWD", "CDUP", "PWD", "MKD", "RMD", "DELE", "RENAME",
    "LIST", "NLST", "DIR", "RETR", "STOR", "SIZE",
    "TYPE", "REST", "OPTS", "NOOP", "SYST", "REIN",
    "ABOR", "FEAT", "PASSIVE", "QUIT",
]

MAX_DISTANCE = 3


def _levenstein(s1: str, s2: str) -> int:
    previous: List[int] = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            current.append(min(
                previous[j] + 1,              # borrar
                current[j - 1] + 1,           # insertar
                previous[j - 1] + (c1 != c2)  # cambiar
            ))
        previous = current
    return previous[-1]


def get_suggestion(cmd: str) -> str:
    """Closest known verb to ``cmd``, or "" if none is within MAX_DISTANCE edits."""
    cmd = cmd.upper()
    best, distance = "", MAX_DISTANCE + 1
    for command in COMMANDS:
        d = _levenstein(cmd, command)
        if d < distance:
            best, distance = command, d
    return best
