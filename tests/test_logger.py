import json
import logging

import pytest

from siv.logger import SivLogger, logger, set_level


class _Collect(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append((record.levelno, record.getMessage()))


@pytest.fixture
def collected():
    handler = _Collect()
    previous = logger.level
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)
    set_level(previous)


def test_events_are_json(collected):
    set_level("DEBUG")
    SivLogger.debug("translate.dropped", reason="unsupported type", line=3)

    (level, message), = collected.messages
    assert level == logging.DEBUG
    assert json.loads(message) == {
        "event": "translate.dropped",
        "data": {"reason": "unsupported type", "line": 3},
    }


def test_filtered_levels_emit_nothing(collected):
    set_level("WARNING")
    SivLogger.debug("translate.dropped", reason="unsupported type")
    SivLogger.info("cli.image_written", path="out.png")
    SivLogger.warning("swift.syntax_errors")

    assert [json.loads(m)["event"] for _, m in collected.messages] == ["swift.syntax_errors"]
