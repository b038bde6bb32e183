"""Payroll policy configuration loaded from YAML."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from payroll_engine.core.schema import PayrollPolicy

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULT_POLICY_PATH = CONFIG_DIR / "payroll_policy.yaml"

_policy: PayrollPolicy | None = None


def _policy_path() -> Path:
    env_path = os.getenv("PAYROLL_POLICY_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return DEFAULT_POLICY_PATH


def load_policy(path: Path | None = None) -> PayrollPolicy:
    """Read a policy file, falling back to built-in defaults when absent."""

    path = path or _policy_path()
    if not path.exists():
        if path != DEFAULT_POLICY_PATH:
            logger.warning("payroll policy %s not found, using defaults", path)
        return PayrollPolicy()
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    logger.debug("loaded payroll policy from %s", path)
    return PayrollPolicy.model_validate(data)


def get_policy() -> PayrollPolicy:
    """Return the process-wide default policy."""

    global _policy
    if _policy is None:
        _policy = load_policy()
    return _policy


def reset_policy_cache() -> None:
    """Forget the cached policy (used in tests)."""

    global _policy
    _policy = None
