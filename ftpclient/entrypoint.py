#!/usr/bin/env python3
"""
Launcher for the ftpclient Streamlit console (``ftpclient-ui``).

Prepares the environment, makes sure the ``ui`` extra is installed and hands
the process over to ``streamlit run`` on the bundled ui/app.py. Usable as a
container command as well.
"""

import argparse
import importlib.util
import logging
import os
import subprocess
import sys

logger = logging.getLogger("ftpclient.entrypoint")

APP_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "ui", "app.py")

DEFAULT_HOST = os.getenv("FTPCLIENT_UI_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("FTPCLIENT_UI_PORT", "8501"))


def prepare_environment():
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
    os.environ.setdefault("STREAMLIT_TELEMETRY_ENABLED", "false")
    os.environ.setdefault("STREAMLIT_BROWSER_GATHER_USAGE_STATS", "false")


def streamlit_available() -> bool:
    if importlib.util.find_spec("streamlit") is None:
        logger.error("✗ streamlit is not installed; run: pip install 'ftpclient[ui]'")
        return False
    logger.info("✓ streamlit available")
    return True


def streamlit_command(host: str, port: int):
    return [
        "streamlit", "run", APP_PATH,
        f"--server.address={host}",
        f"--server.port={port}",
        "--server.headless=true",
        "--logger.level=info",
    ]


def launch(host: str, port: int):
    """Replaces this process with Streamlit; falls back to a child process if exec fails."""
    cmd = streamlit_command(host, port)
    logger.info(f"Starting ftpclient console on http://{host}:{port}")
    try:
        os.execvp(cmd[0], cmd)
    except OSError as e:
        logger.warning(f"exec of streamlit failed ({e}), running it as a subprocess")
    try:
        return subprocess.call(cmd)
    except OSError as e:
        logger.error(f"✗ Could not start streamlit: {e}")
        return 1


def main(argv=None):
    parser = argparse.ArgumentParser(prog="ftpclient-ui", description="Streamlit console for ftpclient")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address Streamlit binds to")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port Streamlit listens on")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    prepare_environment()
    if not streamlit_available():
        sys.exit(1)
    sys.exit(launch(args.host, args.port))


if __name__ == '__main__':
    main()
