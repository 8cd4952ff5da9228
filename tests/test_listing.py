from datetime import datetime, timezone

import pytest

from ftpclient.core.errors import ParseError, UnknownFormatError
from ftpclient.core.listing import parse_dos_line, parse_line, parse_unix_line


class TestUnixListing:

    def test_directory_with_year(self):
        entry = parse_line("drwxr-xr-x 2 user group 4096 Jan 15 2023 mydir")
        assert entry.name == "mydir"
        assert entry.is_dir
        assert entry.size == 4096
        assert entry.permissions == 0o755
        assert entry.mtime == datetime(2023, 1, 15, tzinfo=timezone.utc)

    def test_regular_file_with_time_uses_current_year(self):
        entry = parse_line("-rw-r--r--   1 owner  staff      1234 Mar  3 14:05 notes.txt")
        assert not entry.is_dir
        assert entry.size == 1234
        assert entry.permissions == 0o644
        assert entry.mtime.year == datetime.now(timezone.utc).year
        assert (entry.mtime.month, entry.mtime.day, entry.mtime.hour, entry.mtime.minute) == (3, 3, 14, 5)

    def test_name_with_spaces(self):
        entry = parse_line("-rw-r--r-- 1 user group 10 Dec 31 2022 my summer photos.zip")
        assert entry.name == "my summer photos.zip"

    def test_symlink_keeps_target_in_name(self):
        entry = parse_line("lrwxrwxrwx 1 root root 7 Feb 1 2021 bin -> usr/bin")
        assert entry.name == "bin -> usr/bin"
        assert not entry.is_dir
        assert entry.permissions == 0o777

    def test_setuid_bit_counts_as_execute(self):
        entry = parse_unix_line("-rwsr-xr-x 1 root root 100 Jan 1 2020 passwd")
        assert entry.permissions == 0o755

    def test_month_is_case_insensitive(self):
        entry = parse_unix_line("-rw-r--r-- 1 a b 1 JAN 2 2020 f")
        assert entry.mtime.month == 1

    def test_raw_line_kept(self):
        line = "-rw-r--r-- 1 a b 1 Jan 2 2020 f"
        assert parse_line(line).raw == line

    def test_to_dict(self):
        entry = parse_line("drwxr-xr-x 2 user group 4096 Jan 15 2023 mydir")
        assert entry.to_dict() == {
            "name": "mydir",
            "size": 4096,
            "dir": True,
            "mod_time": "2023-01-15T00:00:00+00:00",
        }

    @pytest.mark.parametrize("line", [
        "-rw-r--r-- 1 user group 12ab Jan 15 2023 file",
        "-rw-r--r-- 1 user group 0x10 Jan 15 2023 file",
        "-rw-r--r-- 1 user group 10 Foo 15 2023 file",
        "-rw-r--r-- 1 user group 10 Jan 15 23 file",
        "-rw-r--r-- 1 user group 10 Feb 30 2023 file",
    ])
    def test_bad_fields_are_hard_errors(self, line):
        with pytest.raises(ParseError) as info:
            parse_line(line)
        assert not isinstance(info.value, UnknownFormatError)

    @pytest.mark.parametrize("line", [
        "total 48",
        "drwxr-xr-x 2 user group 4096 Jan 15",
        "drwx 2 user group 4096 Jan 15 2023 short-perms",
    ])
    def test_unrecognised_lines(self, line):
        with pytest.raises(UnknownFormatError):
            parse_unix_line(line)


class TestDosListing:

    def test_directory_twelve_hour_clock(self):
        entry = parse_line("01-15-23  03:04PM       <DIR>          mydir")
        assert entry.is_dir
        assert entry.name == "mydir"
        assert entry.size == 0
        assert entry.mtime == datetime(2023, 1, 15, 15, 4, tzinfo=timezone.utc)

    def test_file_iso_date(self):
        entry = parse_line("2023-01-15  15:04       1234 afile.txt")
        assert not entry.is_dir
        assert entry.name == "afile.txt"
        assert entry.size == 1234
        assert entry.mtime == datetime(2023, 1, 15, 15, 4, tzinfo=timezone.utc)

    def test_name_with_spaces(self):
        entry = parse_dos_line("10-01-22  09:30AM                  42 annual report.doc")
        assert entry.name == "annual report.doc"
        assert entry.size == 42

    @pytest.mark.parametrize("line", [
        "2023-01-15  15:04       12x4 afile.txt",
        "2023-01-15  15:04       1234",
    ])
    def test_bad_size_is_hard_error(self, line):
        with pytest.raises(ParseError) as info:
            parse_dos_line(line)
        assert not isinstance(info.value, UnknownFormatError)

    @pytest.mark.parametrize("line", ["short line", "not a timestamp!! 1234 file"])
    def test_unrecognised_lines(self, line):
        with pytest.raises(UnknownFormatError):
            parse_dos_line(line)


def test_parse_line_unknown_format():
    with pytest.raises(UnknownFormatError) as info:
        parse_line("this is not a listing line")
    assert "Unknown format" in str(info.value)


@pytest.mark.parametrize("line, name, is_dir, size", [
    ("01-15-23  03:04PM <DIR>          mydir", "mydir", True, 0),
    ("01-15-23  03:04PM       1234 afile.txt", "afile.txt", False, 1234),
])
def test_dos_examples(line, name, is_dir, size):
    entry = parse_line(line)
    assert (entry.name, entry.is_dir, entry.size) == (name, is_dir, size)


def test_parsing_is_repeatable():
    line = "drwxr-xr-x 2 user group 4096 Jan 15 2023 mydir"
    assert parse_line(line) == parse_line(line)
