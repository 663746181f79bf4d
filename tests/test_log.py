import os
import re

import pytest

from asl.log import Level, Log, log


@pytest.fixture
def logger(monkeypatch, tmp_path):
    monkeypatch.delenv("ASL_LOG", raising=False)
    lg = Log()
    lg.set_file(tmp_path / "app.log")
    lg.use_console(False)
    return lg


def read(path):
    with open(path, encoding="utf-8") as f:
        return f.read()


def test_info_written_with_category_base_name(logger, tmp_path):
    logger.log("src/dir/file.cpp", Level.INFO, "hello")
    content = read(tmp_path / "app.log")
    assert re.fullmatch(r"\[[^\]]+\]\[file\] hello\n", content)
    assert logger.max_level() == Level.DEBUG


def test_warning_and_error_prefixes(logger, tmp_path):
    logger.log("cat", Level.WARNING, "careful")
    logger.log("cat", Level.ERROR, "broken")
    lines = read(tmp_path / "app.log").splitlines()
    assert lines[0].endswith("[cat] WARNING: careful")
    assert lines[1].endswith("[cat] ERROR: broken")
    assert logger.max_level() == Level.DEBUG


def test_trailing_newline_not_doubled(logger, tmp_path):
    logger.log("cat", Level.INFO, "line\n")
    content = read(tmp_path / "app.log")
    assert content.endswith("line\n")
    assert not content.endswith("\n\n")
    assert logger.max_level() == Level.DEBUG


def test_max_level_filters(logger, tmp_path):
    logger.set_max_level(Level.WARNING)
    logger.log("cat", Level.INFO, "hidden")
    logger.log("cat", Level.WARNING, "shown")
    content = read(tmp_path / "app.log")
    assert "hidden" not in content
    assert "shown" in content
    assert logger.max_level() == Level.WARNING


def test_enable_toggles_logging(logger, tmp_path):
    logger.enable(False)
    assert logger.max_level() < 0
    logger.log("cat", Level.ERROR, "off")
    assert not os.path.exists(tmp_path / "app.log")
    logger.enable(True)
    assert logger.max_level() == Level.DEBUG
    logger.log("cat", Level.ERROR, "on")
    assert "on" in read(tmp_path / "app.log")


def test_state_shared_through_environment(logger, tmp_path):
    logger.set_max_level(Level.ERROR)
    other = Log()
    assert other.max_level() == Level.ERROR
    other.log("cat", Level.ERROR, "shared")
    assert "shared" in read(tmp_path / "app.log")


def test_large_file_is_rotated(logger, tmp_path):
    path = tmp_path / "app.log"
    path.write_text("x" * 1_000_001, encoding="utf-8")
    logger.log("cat", Level.INFO, "fresh")
    rotated = tmp_path / "app-1.log"
    assert rotated.stat().st_size == 1_000_001
    content = read(path)
    assert content.endswith("[cat] fresh\n")
    assert "xxx" not in content
    assert logger.max_level() == Level.DEBUG


def test_console_output(monkeypatch, tmp_path, capsys):
    monkeypatch.delenv("ASL_LOG", raising=False)
    lg = Log()
    lg.set_file(tmp_path / "unused.log")
    lg.use_file(False)
    lg.use_console(True)
    lg.log("cat", Level.INFO, "to console")
    assert capsys.readouterr().out.endswith("[cat] to console\n")
    assert not os.path.exists(tmp_path / "unused.log")


def test_module_log_formats_arguments(monkeypatch, tmp_path):
    monkeypatch.delenv("ASL_LOG", raising=False)
    shared = Log.instance()
    shared.set_file(tmp_path / "shared.log")
    shared.use_console(False)
    shared.use_file(True)
    shared.set_max_level(Level.DEBUG)
    log("module.py", Level.ERROR, "value=%d name=%s", 5, "abc")
    assert read(tmp_path / "shared.log").endswith("[module] ERROR: value=5 name=abc\n")
    assert Log.instance() is shared