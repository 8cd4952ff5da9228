import io

import pytest

from ftpclient.core import ProtocolError, ShortWriteError, copy_stream, server_to_server


class HalfWriter:
    def write(self, data):
        return len(data) // 2


def test_copy_stream_counts_and_reports_progress():
    source = io.BytesIO(b"x" * 10)
    target = io.BytesIO()
    seen = []
    total = copy_stream(source, target, buffer_size=4, progress=seen.append)
    assert total == 10
    assert target.getvalue() == b"x" * 10
    assert seen == [4, 8, 10]


def test_copy_stream_empty():
    assert copy_stream(io.BytesIO(), io.BytesIO()) == 0


def test_copy_stream_short_write():
    with pytest.raises(ShortWriteError) as info:
        copy_stream(io.BytesIO(b"abcd"), HalfWriter())
    assert info.value.expected == 4
    assert info.value.written == 2


def test_server_to_server(make_session):
    source, source_conn = make_session(
        "227 Entering Passive Mode (10,0,0,1,4,1)", "150 Sending", "226 Transfer complete")
    destination, destination_conn = make_session(
        "200 PORT ok", "150 Receiving", "226 Transfer complete")

    server_to_server(source, destination, "/src/a.bin", "/dst/a.bin", timeout=30.0)

    assert source_conn.sent == ["PASV", "RETR /src/a.bin"]
    assert destination_conn.sent == ["PORT 10,0,0,1,4,1", "STOR /dst/a.bin"]
    assert source_conn.timeouts[-1] == 30.0
    assert destination_conn.timeouts[-1] == 30.0


def test_server_to_server_waits_for_both_before_failing(make_session):
    source, source_conn = make_session(
        "227 Entering Passive Mode (10,0,0,1,4,1)", "150 Sending", "226 Transfer complete")
    destination, _ = make_session(
        "200 PORT ok", "150 Receiving", "452 Disk full")

    with pytest.raises(ProtocolError) as info:
        server_to_server(source, destination, "a", "b")
    assert info.value.code == 452
    assert not source_conn.replies


def test_server_to_server_destination_refuses_port(make_session):
    source, source_conn = make_session("227 Entering Passive Mode (10,0,0,1,4,1)")
    destination, destination_conn = make_session("500 PORT refused")

    with pytest.raises(ProtocolError):
        server_to_server(source, destination, "a", "b")
    assert source_conn.sent == ["PASV"]
    assert destination_conn.sent == ["PORT 10,0,0,1,4,1"]
