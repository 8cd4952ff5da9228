import logging
from typing import Optional


class Logger:
    """
    Capacidad de traza opcional de la sesión.
    La sesión llama a log()/logf() por cada comando enviado y cada respuesta recibida.
    """

    def log(self, message: str):
        raise NotImplementedError

    def logf(self, format: str, *args):
        self.log(format % args if args else format)


class DefaultLogger(Logger):
    """Forwards the trace to a standard ``logging`` logger."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("ftpclient.trace")
        self.level = level

    def log(self, message: str):
        self.logger.log(self.level, message)

    def logf(self, format: str, *args):
        self.logger.log(self.level, format, *args)
