import logging

import pytest


@pytest.fixture(autouse=True)
def restore_lsh_logger():
    """Undo whatever set_logger did to the package logger during a test."""
    logger = logging.getLogger("lsh")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in list(logger.handlers):
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    for handler in saved[0]:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
