"""
Loads the dashboard account file (YAML) and resolves each account's token from
the environment.

Invalid accounts are skipped with a warning; the load only fails when the file
itself is unusable or no account survives validation.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from gpd_backend.core.config import get_settings
from gpd_backend.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "GITHUB_DASHBOARD_CONFIG"
EXAMPLE_CONFIG_NAME = "github-dashboard.example.yml"


@dataclass(frozen=True)
class Account:
    name: str
    organizations: tuple[str, ...]
    token_env: str
    token: str = field(repr=False)


@dataclass
class DashboardConfigLoadResult:
    config_path: str
    accounts: list[Account]
    warnings: list[str]


def _resolve_requested_path(path: str | os.PathLike | None) -> str:
    if path is not None:
        return str(path)
    return os.getenv(CONFIG_PATH_ENV) or get_settings().github_dashboard_config


def _to_absolute(requested_path: str) -> Path:
    candidate = Path(requested_path).expanduser()
    if candidate.is_absolute():
        return candidate
    return Path.cwd() / candidate


def _normalize_organizations(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _clean_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _validate_account(raw: Any, index: int, warnings: list[str]) -> Account | None:
    entry = raw if isinstance(raw, dict) else {}

    token_env = _clean_str(entry.get("tokenEnv"))
    if not token_env:
        warnings.append(f'Skipped account #{index + 1}: missing "tokenEnv" in config.')
        return None

    organizations = _normalize_organizations(entry.get("organizations"))
    if not organizations:
        warnings.append(f'Skipped account "{token_env}": no organizations configured.')
        return None

    token = (os.environ.get(token_env) or "").strip()
    if not token:
        warnings.append(
            f'Skipped account "{token_env}": environment variable {token_env} is empty or missing.'
        )
        return None

    return Account(
        name=_clean_str(entry.get("name")) or token_env,
        organizations=tuple(organizations),
        token_env=token_env,
        token=token,
    )


def load_dashboard_config(path: str | os.PathLike | None = None) -> DashboardConfigLoadResult:
    """
    Reads and validates the dashboard config.

    Args:
        path: Explicit config path; defaults to $GITHUB_DASHBOARD_CONFIG, then
            the configured default (github-dashboard.yml)

    Returns:
        Valid accounts in file order plus warnings for every skipped entry

    Raises:
        ConfigError: file unreadable, not YAML, no accounts, or none valid
    """
    requested_path = _resolve_requested_path(path)
    config_path = _to_absolute(requested_path)

    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(
            f'Could not read config file "{requested_path}". '
            f"Create it from {EXAMPLE_CONFIG_NAME} or set {CONFIG_PATH_ENV}."
        ) from e

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f'Config file "{requested_path}" is not valid YAML. Please fix the syntax.'
        ) from e

    raw_accounts = parsed.get("accounts") if isinstance(parsed, dict) else None
    if not isinstance(raw_accounts, list) or not raw_accounts:
        raise ConfigError(
            f'Invalid config at {requested_path}: expected "accounts" with at least one account entry.'
        )

    warnings: list[str] = []
    accounts: list[Account] = []
    for index, raw in enumerate(raw_accounts):
        account = _validate_account(raw, index, warnings)
        if account is not None:
            accounts.append(account)

    for warning in warnings:
        logger.warning(warning)

    if not accounts:
        raise ConfigError(
            f"No valid accounts found in {requested_path}. Check token env vars and organizations."
        )

    logger.info(
        f"Loaded {len(accounts)} dashboard account(s) from {requested_path}",
        extra={"accounts": [account.name for account in accounts], "skipped": len(warnings)},
    )
    return DashboardConfigLoadResult(
        config_path=requested_path,
        accounts=accounts,
        warnings=warnings,
    )
