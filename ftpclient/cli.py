import argparse
import logging
import os
import sys
import time

from ftpclient.core import (
    Config,
    DefaultLogger,
    FTPError,
    FTPSession,
    new_tls_policy,
    new_tls_policy_with_key_pair,
    server_to_server,
)

logger = logging.getLogger("ftpclient.cli")


def _add_server_args(parser, prefix="", label="target"):
    parser.add_argument(f"--{prefix}host", required=True, help=f"{label} host name")
    parser.add_argument(f"--{prefix}port", type=int, default=21, help="tcp/ip port number")
    parser.add_argument(f"--{prefix}user", default="anonymous", help="login username")
    parser.add_argument(f"--{prefix}pass", dest=f"{prefix.replace('-', '_')}password", default="anonymous@", help="login password")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ftpclient", description="FTP / FTPS client")
    parser.add_argument("--timeout", type=float, default=30.0, help="dial timeout in seconds")
    parser.add_argument("--rw-timeout", type=float, default=120.0, help="read/write timeout in seconds")
    parser.add_argument("--trace", help="also write the protocol log to this file")
    parser.add_argument("--tls", action="store_true", help="use explicit TLS (AUTH TLS)")
    parser.add_argument("--implicit", action="store_true", help="use implicit TLS")
    parser.add_argument("--insecure", action="store_true", help="do not verify the server certificate")
    parser.add_argument("--cert", help="certificate file (needed for TLS in active mode)")
    parser.add_argument("--key", help="private key file")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--passive", dest="passive", action="store_true", default=True, help="passive mode (default)")
    mode.add_argument("--active", dest="passive", action="store_false", help="active mode (PORT/EPRT)")

    sub = parser.add_subparsers(dest="command", required=True)

    p_dir = sub.add_parser("dir", help="list a remote directory")
    _add_server_args(p_dir)
    p_dir.add_argument("--remote", default="", help="remote path")

    p_get = sub.add_parser("get", help="download a file")
    _add_server_args(p_get)
    p_get.add_argument("--remote", required=True, help="remote file path")
    p_get.add_argument("--local", help="local file path (default: remote basename)")

    p_put = sub.add_parser("put", help="upload a file, showing progress")
    _add_server_args(p_put)
    p_put.add_argument("--local", required=True, help="local file path")
    p_put.add_argument("--remote", help="remote file path (default: local basename)")

    p_fxp = sub.add_parser("fxp", help="server-to-server transfer")
    _add_server_args(p_fxp, prefix="src-", label="source")
    p_fxp.add_argument("--src-path", required=True, help="source file path")
    _add_server_args(p_fxp, prefix="dst-", label="destination")
    p_fxp.add_argument("--dst-path", required=True, help="destination file path")
    p_fxp.add_argument("--wait", type=float, default=600.0, help="timeout seconds for the transfer")

    return parser


def build_config(args) -> Config:
    policy = None
    if args.tls or args.implicit:
        if args.cert and args.key:
            policy = new_tls_policy_with_key_pair(args.cert, args.key, verify=not args.insecure)
        else:
            policy = new_tls_policy(verify=not args.insecure)
    return Config(
        passive=args.passive,
        read_write_timeout=args.rw_timeout,
        tls_policy=policy,
        tls_implicit=args.implicit,
        logger=DefaultLogger(),
    )


def setup_logging(trace_file=None):
    handlers = [logging.StreamHandler(sys.stderr)]
    if trace_file:
        handlers.append(logging.FileHandler(trace_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def _open_session(config, host, port, user, password, timeout) -> FTPSession:
    session = FTPSession(config).connect(host, port, timeout)
    try:
        session.login(user, password)
        session.type("I")
    except FTPError:
        session.quit()
        raise
    return session


def cmd_dir(args, config):
    with _open_session(config, args.host, args.port, args.user, args.password, args.timeout) as session:
        for entry in session.dir(args.remote):
            print(f" Name: {entry.name} Size: {entry.size}")


def cmd_get(args, config):
    local = args.local or os.path.basename(args.remote)
    with _open_session(config, args.host, args.port, args.user, args.password, args.timeout) as session:
        size = session.retr_file(args.remote, local)
    return size


def cmd_put(args, config):
    remote = args.remote or os.path.basename(args.local)
    filesize = os.path.getsize(args.local)

    def progress(sent):
        percent = (sent * 100 // filesize) if filesize else 100
        print(f"\r{sent}/{filesize} bytes ({percent}%)", end="", flush=True)

    with _open_session(config, args.host, args.port, args.user, args.password, args.timeout) as session:
        size = session.stor_file(args.local, remote, progress=progress)
    print()
    return size


def cmd_fxp(args, config):
    logger.info(f"source: {args.src_host} {args.src_path}")
    logger.info(f"destination: {args.dst_host} {args.dst_path}")
    logger.info(f"timeout: {args.wait} seconds")
    with _open_session(config, args.src_host, args.src_port, args.src_user, args.src_password, args.timeout) as source:
        with _open_session(config, args.dst_host, args.dst_port, args.dst_user, args.dst_password, args.timeout) as destination:
            server_to_server(source, destination, args.src_path, args.dst_path, timeout=args.wait)


COMMANDS = {
    "dir": cmd_dir,
    "get": cmd_get,
    "put": cmd_put,
    "fxp": cmd_fxp,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.trace)

    logger.info("Start")
    start = time.monotonic()
    try:
        config = build_config(args)
        size = COMMANDS[args.command](args, config)
    except (FTPError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    sec = time.monotonic() - start
    if size and sec > 0:
        logger.info(f"Stopwatch : {sec:f} seconds, {size * 8 / sec / 1048576:f} Mbit/s")
    else:
        logger.info(f"Stopwatch : {sec:f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
