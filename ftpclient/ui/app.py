import sys
import os

# Ensure project root is on sys.path so `import ftpclient` resolves when Streamlit runs
# the script straight from its directory
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from datetime import datetime, timezone
import threading
import time
import logging

from ftpclient.core import Config, DefaultLogger, FTPError, FTPSession, new_tls_policy
from ftpclient.ui.console import run_command

import streamlit as st

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


st.set_page_config(page_title="ftpclient UI", layout="wide")

# --- Helpers -----------------------------------------------------------------

def run_in_thread(fn, *args, **kwargs):
    result = {"value": None, "error": None}
    def target():
        try:
            result["value"] = fn(*args, **kwargs)
        except Exception as e:
            result["error"] = e
    t = threading.Thread(target=target)
    t.start()
    return t, result


def wait_for(t, label: str):
    with st.spinner(label):
        while t.is_alive():
            time.sleep(0.05)


def record_local(command: str, raw: str, error: bool):
    tmp = st.session_state.get("tmp_history", [])
    tmp.append({
        "time": datetime.now(timezone.utc),
        "command": command,
        "raw": raw,
        "parsed": None,
        "error": error
    })
    st.session_state["tmp_history"] = tmp


def render_entry(entry):
    t = entry.get("time")
    time_str = t.isoformat() if isinstance(t, datetime) else str(t)
    with st.expander(f"{time_str} — {entry.get('command')}"):
        parsed = entry.get("parsed")
        if parsed:
            st.write(f"Code: {parsed.code}")
            st.write(f"Message: {parsed.message}")
            st.write(f"Type: {parsed.type}")
        if entry.get("raw"):
            st.code(entry.get("raw"))
        if entry.get("error"):
            st.error("This entry had an error")


# --- UI ----------------------------------------------------------------------
st.title("ftpclient — Streamlit Console")

if "session" not in st.session_state:
    st.session_state["session"] = None

with st.sidebar:
    st.header("Connection")
    host = st.text_input("Host", value="127.0.0.1")
    port = st.number_input("Port", min_value=1, max_value=65535, value=21)
    user = st.text_input("User", value="anonymous")
    password = st.text_input("Password", value="anonymous@", type="password")
    timeout = st.number_input("Timeout (s)", min_value=1.0, max_value=600.0, value=30.0)
    passive = st.checkbox("Passive mode", value=True)
    tls = st.selectbox("TLS", ["none", "explicit", "implicit"])
    verify = st.checkbox("Verify certificate", value=True)

    if st.button("Connect"):
        logger.info(f"[UI] Connect button clicked: {host}:{port}")
        config = Config(
            passive=passive,
            read_write_timeout=float(timeout),
            tls_policy=new_tls_policy(verify=verify) if tls != "none" else None,
            tls_implicit=tls == "implicit",
            logger=DefaultLogger(),
        )
        session = FTPSession(config)

        def open_session():
            session.connect(host, int(port), float(timeout))
            try:
                session.login(user, password)
            except FTPError:
                session.quit()
                raise
            return session

        t, result = run_in_thread(open_session)
        wait_for(t, "Connecting...")
        if result["error"]:
            logger.error(f"[UI] Connection failed: {result['error']}")
            st.session_state["session"] = None
            record_local(f"CONNECT {host}:{port}", str(result["error"]), True)
            st.error(f"Connection failed: {result['error']}")
        else:
            st.session_state["session"] = session
            logger.info("[UI] Connection successful")
            st.success(f"Connected to {host}:{port}")

    if st.button("Disconnect"):
        logger.info("[UI] Disconnect button clicked")
        session = st.session_state.get("session")
        if session:
            try:
                session.quit()
                record_local("DISCONNECT", "Disconnected by user", False)
                st.info("Disconnected")
            except FTPError as e:
                logger.error(f"[UI] Error disconnecting: {e}")
                st.error(f"Error disconnecting: {e}")
            st.session_state["session"] = None


col1, col2 = st.columns([3, 1])

with col1:
    st.subheader("Terminal")
    cmd = st.text_input("Command", placeholder="e.g. cwd /pub", key="cmd_input")
    cmd_run = st.button("Run")

    # File upload for STOR
    uploaded_file = st.file_uploader("Upload file for STOR", key="upload_file")

    if cmd_run and cmd.strip():
        logger.info(f"[UI] Command executed: {cmd}")
        session = st.session_state.get("session")
        if not session:
            logger.warning("[UI] Not connected")
            st.error("Not connected. Connect first.")
        else:
            line = cmd.strip()
            parts = line.split()
            if parts[0].lower() == "stor":
                if uploaded_file is None:
                    st.error("Select a file to upload using the uploader above.")
                    line = ""
                else:
                    local_path = f"/tmp/streamlit_upload_{int(time.time())}_{uploaded_file.name}"
                    logger.debug(f"[UI] STOR temp file: {local_path}")
                    with open(local_path, "wb") as f:
                        f.write(uploaded_file.getbuffer())
                    remote = parts[1] if len(parts) > 1 else uploaded_file.name
                    line = f'stor "{local_path}" "{remote}"'

            if line:
                t, result = run_in_thread(run_command, session, line)
                wait_for(t, "Running...")
                if result["error"]:
                    logger.error(f"[UI] Command error: {result['error']}")
                    st.error(f"Error: {result['error']}")
                else:
                    out = result["value"]
                    if not out.ok:
                        st.error(out.message)
                    elif isinstance(out.data, str) and "\n" in out.data:
                        st.success(out.message.splitlines()[0] if out.message else "OK")
                        st.text_area("Output", value=out.data, height=300)
                    else:
                        st.success(out.message)
                if session.conn is None:
                    st.session_state["session"] = None

with col2:
    st.subheader("History")
    session = st.session_state.get("session")
    if session is None:
        st.info("No history: not connected")
        for entry in reversed(st.session_state.get("tmp_history", [])[-50:]):
            render_entry(entry)
    else:
        if st.button("Clear History"):
            session.clear_history()
            st.rerun()
        for entry in reversed(session.get_history()[-100:]):
            render_entry(entry)


# Footer
st.markdown("---")
st.caption("ftpclient Streamlit UI — showing command history, progress and errors.")
