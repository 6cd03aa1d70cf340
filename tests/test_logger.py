import io
import logging

import pytest

from flowaudit.utils.logger import ROOT_LOGGER, get_logger, init_logger, timed, workflow_logger


@pytest.fixture
def stream():
    buf = io.StringIO()
    yield buf
    logger = logging.getLogger(ROOT_LOGGER)
    for h in logger.handlers:
        h.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_workflow_prefix_and_file_handler(stream, tmp_path):
    init_logger(level=logging.DEBUG, stream=stream, log_dir=tmp_path)
    log = workflow_logger(get_logger("quality"), "wf-9")

    log.info("validated")
    with timed(log, "category validation"):
        pass

    text = stream.getvalue()
    assert "flowaudit.quality" in text
    assert "[wf=wf-9] validated" in text
    assert "category validation took" in text
    assert "[wf=wf-9] validated" in (tmp_path / "flowaudit.log").read_text(encoding="utf-8")


def test_level_from_env(stream, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.delenv("FLOWAUDIT_LOG_DIR", raising=False)
    logger = init_logger(stream=stream)
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1

    get_logger("engine").info("hidden")
    workflow_logger(get_logger("engine"), None).warning("shown")
    assert "hidden" not in stream.getvalue()
    assert "[wf=-] shown" in stream.getvalue()

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert init_logger(stream=stream).level == logging.INFO
