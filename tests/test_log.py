"""Tests for logging."""

import pytest

from yamlls_bridge.util.log import Log, LogLevel


@pytest.fixture(autouse=True)
def restore_log():
    level = Log.get_level()
    yield
    Log.close()
    Log.set_level(level)


def test_file_logging(tmp_path):
    Log.init(level=LogLevel.WARN, log_dir=tmp_path)
    logger = Log.create({"service": "test.file", "bundle": "b"})

    logger.info("hidden")
    logger.error("Cannot find entry", {"path": "/x"})
    Log.close()

    lines = (tmp_path / next(p.name for p in tmp_path.iterdir())).read_text().splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("ERROR ")
    assert "service=test.file bundle=b path=/x Cannot find entry" in lines[0]


def test_old_files_are_pruned(tmp_path):
    for i in range(12):
        (tmp_path / f"old-{i:02}.log").write_text("")

    Log.init(log_dir=tmp_path)

    assert len(list(tmp_path.glob("*.log"))) == 10


def test_loggers_are_cached_per_service():
    assert Log.create({"service": "test.cached"}) is Log.create({"service": "test.cached"})
    assert Log.create() is not Log.create()
