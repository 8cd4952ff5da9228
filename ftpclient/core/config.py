import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from ftpclient.core.logger import Logger
from ftpclient.core.tls import TLSPolicy, new_tls_policy, new_tls_policy_with_key_pair

DEFAULT_READ_WRITE_TIMEOUT = 120.0


def _env_flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes')


@dataclass(frozen=True)
class Config:
    """
    Session settings, fixed before the session is created.

    - passive: initial data connection mode (False = active, PORT/EPRT)
    - read_write_timeout: seconds allowed for each socket read or write
    - tls_policy: encrypt control and data connections when set
    - tls_implicit: TLS from the first byte (port 990 style) instead of AUTH TLS
    - logger: optional trace capability (see ftpclient.core.logger)
    """
    passive: bool = False
    read_write_timeout: float = DEFAULT_READ_WRITE_TIMEOUT
    tls_policy: Optional[TLSPolicy] = None
    tls_implicit: bool = False
    logger: Optional[Logger] = None

    def with_logger(self, logger: Logger) -> "Config":
        return replace(self, logger=logger)

    def with_tls_policy(self, policy: Optional[TLSPolicy]) -> "Config":
        return replace(self, tls_policy=policy)

    def with_tls_implicit(self, implicit: bool) -> "Config":
        return replace(self, tls_implicit=implicit)

    def with_read_write_timeout(self, timeout: float) -> "Config":
        return replace(self, read_write_timeout=timeout)

    def with_passive(self, passive: bool) -> "Config":
        return replace(self, passive=passive)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Builds a Config from FTPCLIENT_* environment variables."""
        if environ is None:
            environ = os.environ

        timeout = DEFAULT_READ_WRITE_TIMEOUT
        raw_timeout = environ.get("FTPCLIENT_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ValueError(f"FTPCLIENT_TIMEOUT is not a number: {raw_timeout!r}") from e
            if timeout <= 0:
                raise ValueError(f"FTPCLIENT_TIMEOUT must be positive: {raw_timeout!r}")

        policy = None
        if _env_flag(environ, "FTPCLIENT_TLS"):
            verify = _env_flag(environ, "FTPCLIENT_TLS_VERIFY", default=True)
            cert = environ.get("FTPCLIENT_TLS_CERT")
            key = environ.get("FTPCLIENT_TLS_KEY")
            if cert and key:
                policy = new_tls_policy_with_key_pair(cert, key, verify=verify)
            else:
                policy = new_tls_policy(verify=verify)

        return cls(
            passive=_env_flag(environ, "FTPCLIENT_PASSIVE"),
            read_write_timeout=timeout,
            tls_policy=policy,
            tls_implicit=_env_flag(environ, "FTPCLIENT_TLS_IMPLICIT"),
        )
