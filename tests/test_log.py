import sys
import os
import logging
from logging.handlers import RotatingFileHandler

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from lsh.log import ColoredFormatter, set_logger


def test_set_logger_levels():
    logger = set_logger("INFO")
    assert logger.name == "lsh"
    assert logger.level == logging.INFO
    assert set_logger("WARNING", debug=True).level == logging.DEBUG
    assert set_logger("nonsense").level == logging.WARNING


def test_set_logger_replaces_handlers(tmp_path):
    log_file = tmp_path / "logs" / "lsh.log"
    logger = set_logger("DEBUG", log_file)
    assert len(logger.handlers) == 2
    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
    logging.getLogger("lsh.executor").debug("hello file")
    for h in logger.handlers:
        h.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")

    logger = set_logger("DEBUG")
    assert len(logger.handlers) == 1


def test_colored_formatter_restores_levelname():
    record = logging.LogRecord("lsh", logging.ERROR, __file__, 1, "boom", None, None)
    text = ColoredFormatter("%(levelname)s %(message)s").format(record)
    assert "\x1b[" in text and "boom" in text
    assert record.levelname == "ERROR"
