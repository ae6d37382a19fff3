import os
import re

import pytest

from idcframe.fileio import InFile, LogFile, OutFile


def test_outfile_uses_tmp_until_renamed(tmp_path):
    target = tmp_path / "out.txt"
    ofile = OutFile()
    ofile.open(str(target))
    ofile.write("hello\n")
    ofile.write("world\n")
    assert not target.exists()
    assert (tmp_path / "out.txt.tmp").exists()
    ofile.close_and_rename()
    assert target.read_text(encoding="utf-8") == "hello\nworld\n"
    assert not (tmp_path / "out.txt.tmp").exists()
    assert not ofile.is_open


def test_outfile_close_discards_tmp(tmp_path):
    target = tmp_path / "out.txt"
    ofile = OutFile()
    ofile.open(str(target))
    ofile.write("partial")
    ofile.close()
    assert not target.exists()
    assert not (tmp_path / "out.txt.tmp").exists()


def test_outfile_without_tmp_writes_directly(tmp_path):
    target = tmp_path / "direct.bin"
    ofile = OutFile()
    ofile.open(str(target), tmp=False, mode="wb", buffered=False)
    ofile.write(b"\x00\x01\x02")
    assert target.read_bytes() == b"\x00\x01\x02"
    ofile.close()
    assert target.read_bytes() == b"\x00\x01\x02"


def test_outfile_creates_directories(tmp_path):
    target = tmp_path / "a" / "b" / "c.txt"
    with OutFile() as ofile:
        ofile.open(str(target))
        ofile.write("x")
    assert target.read_text(encoding="utf-8") == "x"


def test_outfile_context_discards_on_error(tmp_path):
    target = tmp_path / "out.txt"
    with pytest.raises(RuntimeError):
        with OutFile() as ofile:
            ofile.open(str(target))
            ofile.write("data")
            raise RuntimeError("boom")
    assert not target.exists()
    assert not (tmp_path / "out.txt.tmp").exists()


def test_outfile_write_when_closed_raises():
    with pytest.raises(ValueError):
        OutFile().write("x")
    with pytest.raises(ValueError):
        OutFile().close_and_rename()


def test_outfile_rejects_read_mode(tmp_path):
    with pytest.raises(ValueError):
        OutFile().open(str(tmp_path / "x"), mode="r")


def test_infile_read_line_drops_unterminated_last_line(tmp_path):
    path = tmp_path / "in.txt"
    path.write_bytes(b"a\nb\nc")
    ifile = InFile()
    ifile.open(str(path))
    assert ifile.read_line() == "a"
    assert ifile.read_line() == "b"
    assert ifile.read_line() is None


def test_infile_read_line_with_end_marker(tmp_path):
    path = tmp_path / "in.xml"
    path.write_bytes(b"<t>1\n2<endl/>\n<t>3<endl/>\n<t>4\n")
    with InFile() as ifile:
        ifile.open(str(path))
        assert ifile.read_line("<endl/>") == "<t>1\n2<endl/>"
        assert ifile.read_line("<endl/>") == "<t>3<endl/>"
        assert ifile.read_line("<endl/>") is None


def test_infile_iterates_lines(tmp_path):
    path = tmp_path / "in.txt"
    path.write_text("x\ny\nz\n", encoding="utf-8")
    ifile = InFile()
    ifile.open(str(path))
    assert list(ifile) == ["x", "y", "z"]


def test_infile_binary_read_and_remove(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"abcdef")
    ifile = InFile()
    ifile.open(str(path), binary=True)
    assert ifile.read(4) == b"abcd"
    assert ifile.read(4) == b"ef"
    with pytest.raises(ValueError):
        ifile.read_line()
    ifile.close_and_remove()
    assert not path.exists()


def test_infile_open_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        InFile().open(str(tmp_path / "missing.txt"))


def test_infile_close_and_remove_when_closed_raises():
    with pytest.raises(ValueError):
        InFile().close_and_remove()


def test_logfile_write_prefixes_time(tmp_path):
    path = tmp_path / "log" / "app.log"
    log = LogFile()
    log.open(str(path))
    log.write("started %d\n", 3)
    log.write("100% done\n")
    log.close()
    lines = path.read_text(encoding="utf-8").splitlines(keepends=True)
    assert len(lines) == 2
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} started 3\n", lines[0])
    assert lines[1].endswith(" 100% done\n")


def test_logfile_lshift_writes_raw(tmp_path):
    path = tmp_path / "raw.log"
    with LogFile() as log:
        log.open(str(path), mode="w")
        log << "a" << 1 << "\n"
    assert path.read_text(encoding="utf-8") == "a1\n"


def test_logfile_rotates_when_too_big(tmp_path):
    path = tmp_path / "rot.log"
    log = LogFile(max_size_mb=0)
    log.open(str(path))
    log.write("first\n")
    log.write("second\n")
    log.close()
    backups = [name for name in os.listdir(tmp_path) if name.startswith("rot.log.")]
    assert len(backups) == 1
    assert re.fullmatch(r"rot\.log\.\d{14}", backups[0])
    assert (tmp_path / backups[0]).read_text(encoding="utf-8").endswith("first\n")
    assert path.read_text(encoding="utf-8").endswith("second\n")


def test_logfile_without_backup_keeps_one_file(tmp_path):
    path = tmp_path / "one.log"
    log = LogFile(max_size_mb=0)
    log.open(str(path), backup=False)
    log.write("first\n")
    log.write("second\n")
    log.close()
    assert os.listdir(tmp_path) == ["one.log"]
    assert path.read_text(encoding="utf-8").count("\n") == 2


def test_logfile_write_when_closed_raises():
    with pytest.raises(ValueError):
        LogFile().write("x\n")