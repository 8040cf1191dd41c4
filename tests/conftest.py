import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fakes import SAMPLE_CSV, FakeNetwork, shell_routes
from src.tugs import get_config


@pytest.fixture
def config():
    return get_config("default")


@pytest.fixture
def network(config):
    return FakeNetwork(shell_routes(config))


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV
