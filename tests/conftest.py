import sys
from pathlib import Path

import numpy as np
import pytest

# Модулі лежать у корені репозиторію
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from Config import SimulationConfig
from Estimator import EstimatorState
from Scheduler import ManualScheduler
from Wager import WagerManager


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def config():
    return SimulationConfig(seed=12345)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def estimator():
    return EstimatorState(needle_length=50.0, line_spacing=100.0)


@pytest.fixture
def manager(estimator, scheduler):
    cfg = SimulationConfig(convergence_target_digits=2, starting_balance=100.0)
    return WagerManager(estimator, cfg, scheduler)
