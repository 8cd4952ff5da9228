"""End-to-end tests against a local pyftpdlib server, in passive and active mode."""

import pytest

from ftpclient.core import Config, FTPSession, LoginError, ProtocolError, connect, server_to_server


@pytest.fixture(params=[True, False], ids=["passive", "active"])
def session(request, ftp_server):
    config = Config(passive=request.param, read_write_timeout=10.0)
    with connect(ftp_server.host, ftp_server.port, timeout=5.0, config=config) as session:
        session.login(ftp_server.user, ftp_server.password)
        session.type("I")
        yield session


def test_pwd_and_directories(session, ftp_server):
    assert session.pwd() == "/"
    assert session.mkd("reports") == "/reports"
    session.cwd("reports")
    assert session.pwd() == "/reports"
    session.cdup()
    session.rmd("reports")
    assert not (ftp_server.root / "reports").exists()


def test_upload_download_roundtrip(session, tmp_path):
    payload = bytes(range(256)) * 512
    local = tmp_path / "payload.bin"
    local.write_bytes(payload)

    progress = []
    assert session.stor_file(str(local), "payload.bin", progress=progress.append) == len(payload)
    assert progress[-1] == len(payload)
    assert session.size("payload.bin") == len(payload)

    target = tmp_path / "back.bin"
    assert session.retr_file("payload.bin", str(target)) == len(payload)
    assert target.read_bytes() == payload


def test_listings(session, ftp_server):
    (ftp_server.root / "a.txt").write_bytes(b"abc")
    (ftp_server.root / "sub").mkdir()

    assert sorted(session.nlst()) == ["a.txt", "sub"]
    assert len(session.list()) == 2

    entries = {entry.name: entry for entry in session.dir()}
    assert entries["a.txt"].size == 3
    assert not entries["a.txt"].is_dir
    assert entries["sub"].is_dir


def test_session_usable_after_transfer(session, ftp_server):
    (ftp_server.root / "a.txt").write_bytes(b"abc")
    session.list()
    session.noop()
    assert session.pwd() == "/"


def test_rename_and_delete(session, ftp_server):
    (ftp_server.root / "old.txt").write_bytes(b"x")
    session.rename("old.txt", "new.txt")
    assert (ftp_server.root / "new.txt").exists()
    session.delete("new.txt")
    assert not (ftp_server.root / "new.txt").exists()


def test_delete_missing_file(session):
    with pytest.raises(ProtocolError) as info:
        session.delete("ghost.txt")
    assert info.value.code == 550
    session.noop()


def test_retr_missing_file(session, tmp_path):
    with pytest.raises(ProtocolError) as info:
        session.retr_file("ghost.txt", str(tmp_path / "ghost.txt"))
    assert info.value.code == 550
    session.noop()


def test_feat_and_syst(session):
    features = session.feat()
    assert "SIZE" in features
    assert any(f.startswith("EPRT") for f in features)
    assert session.syst().startswith("UNIX")


def test_wrong_password(ftp_server):
    with connect(ftp_server.host, ftp_server.port, config=Config(read_write_timeout=10.0)) as session:
        with pytest.raises(LoginError) as info:
            session.login(ftp_server.user, "wrong")
        assert info.value.code == 530


def test_server_to_server(ftp_server):
    (ftp_server.root / "source.bin").write_bytes(b"fxp" * 1000)
    config = Config(read_write_timeout=10.0)
    with FTPSession(config).connect(ftp_server.host, ftp_server.port) as source, \
            FTPSession(config).connect(ftp_server.host, ftp_server.port) as destination:
        for s in (source, destination):
            s.login(ftp_server.user, ftp_server.password)
            s.type("I")
        server_to_server(source, destination, "source.bin", "copy.bin", timeout=10.0)
        assert destination.size("copy.bin") == 3000
    assert (ftp_server.root / "copy.bin").read_bytes() == b"fxp" * 1000
