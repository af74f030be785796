import logging
from pathlib import Path

import pytest
from dotenv import load_dotenv

from chunkwise.config import ChunkwiseConfig
from chunkwise.session.structured_session import StructuredSession
from chunkwise.utils.singleton import SingletonMeta

# --- Eagerly load test environment on import ---
# Settings must be in the environment before ChunkwiseConfig is first built.
project_root = Path(__file__).parent.parent
env_test_path = project_root / '.env.test'

if env_test_path.exists():
    load_dotenv(env_test_path, override=True)
    logging.info(f"Loaded test environment from {env_test_path}")


def pytest_configure(config):
    logger = logging.getLogger('chunkwise')
    logger.setLevel(logging.DEBUG)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    ch.setFormatter(formatter)
    logger.addHandler(ch)


@pytest.fixture(autouse=True)
def fresh_config():
    """Rebuilds ChunkwiseConfig after each test so env changes do not leak."""
    yield
    SingletonMeta._instances.pop(ChunkwiseConfig, None)


@pytest.fixture
def start_session():
    """
    Starts sessions for a test and stops every one of them afterwards.

    Usage: ``session = start_session("text")``.
    """
    sessions = []

    def _start(mode, **kwargs):
        session = StructuredSession.start(mode, **kwargs)
        sessions.append(session)
        return session

    yield _start

    for session in sessions:
        if not session.status.is_terminal():
            session.stop(timeout=5.0)


@pytest.fixture
def binary_session(start_session):
    return start_session("binary")


@pytest.fixture
def text_session(start_session):
    return start_session("text")
