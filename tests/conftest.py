import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Put back the root logger handlers after each test.

    The CLI commands call ``logging.basicConfig(force=True)`` which binds a
    handler to the stderr of the click test runner. That stream is closed
    once the invocation returns, so the handler must not outlive the test.
    """
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield
    finally:
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
        for handler in handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(level)
