"""
Shared pytest fixtures for nantrace tests.
"""

import logging
from pathlib import Path

import pytest

from nantrace import LogConfig

LIBRARY_PATH = "/opt/venv/lib/python3.12/site-packages/numlib/ops.py"

# Compiled under a site-packages filename so that live stacks contain frames
# that resolve to the "numlib" library.
_LIBRARY_SOURCE = '''
def guarded_op(injector):
    return injector.should_inject()


def guarded_op_functional(injector):
    from nantrace import should_inject
    return should_inject(injector)


def make_event(constructor, op, args):
    return constructor(op, args)
'''


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy access.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_dir = test_output_root / module_name / request.node.name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture(autouse=True)
def reset_nantrace_logging():
    """Reset the nantrace logger to its silent default around each test."""
    logger = logging.getLogger("nantrace")

    def reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    reset()
    yield
    reset()


@pytest.fixture
def numlib() -> dict:
    """Functions whose frames live in the fake ``numlib`` library."""
    namespace: dict = {}
    exec(compile(_LIBRARY_SOURCE, LIBRARY_PATH, "exec"), namespace)
    return namespace


@pytest.fixture
def log_config(tmp_path) -> LogConfig:
    return LogConfig(filename=tmp_path / "run", buffersize=100, cstg=True)
