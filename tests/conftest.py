import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from payroll_engine.core.settings import reset_policy_cache


@pytest.fixture(autouse=True)
def reset_policy(monkeypatch):
    monkeypatch.delenv("PAYROLL_POLICY_PATH", raising=False)
    reset_policy_cache()
    yield
    reset_policy_cache()
