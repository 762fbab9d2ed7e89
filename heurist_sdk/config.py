"""Client configuration.

``ClientConfig`` is a plain value passed into the clients. Nothing in the SDK
reads the environment on its own; ``load_config`` is the explicit opt-in for
callers (and the CLI) that want ``HEURIST_*`` variables or a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .errors import ConfigurationError

DEFAULT_BASE_URL = "http://sequencer.heurist.xyz"
DEFAULT_REQUEST_TIMEOUT = 15.0
MIN_POLL_INTERVAL_MS = 1000

ENV_API_KEY = "HEURIST_API_KEY"
ENV_BASE_URL = "HEURIST_BASE_URL"
ENV_WORKFLOW_URL = "HEURIST_WORKFLOW_URL"
ENV_REQUEST_TIMEOUT = "HEURIST_REQUEST_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    workflow_url: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    min_poll_interval_ms: int = MIN_POLL_INTERVAL_MS

    def with_overrides(self, **overrides: object) -> "ClientConfig":
        """Return a copy with every non-``None`` override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values) if values else self


def read_env_file(path: Union[str, Path]) -> Dict[str, str]:
    env: Dict[str, str] = {}
    env_path = Path(path).expanduser()
    if not env_path.exists():
        return env
    for line in env_path.read_text().splitlines():
        if not line or line.strip().startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        env[key.strip()] = value.strip().strip("'\"")
    return env


def load_config(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Build a ``ClientConfig`` from a ``.env`` file and the process environment.

    Environment variables win over the file. Blank values count as unset.
    """

    merged: Dict[str, str] = {}
    if env_file is not None:
        merged.update(read_env_file(env_file))
    source = os.environ if environ is None else environ
    for key in (ENV_API_KEY, ENV_BASE_URL, ENV_WORKFLOW_URL, ENV_REQUEST_TIMEOUT):
        value = (source.get(key) or "").strip()
        if value:
            merged[key] = value

    api_key = merged.get(ENV_API_KEY, "").strip()
    if not api_key:
        raise ConfigurationError(
            f"The {ENV_API_KEY} environment variable is missing or empty; either provide it, "
            "or instantiate the Heurist client with an api_key option, like Heurist(api_key='My API Key')."
        )

    timeout_raw = merged.get(ENV_REQUEST_TIMEOUT, "").strip()
    try:
        request_timeout = float(timeout_raw) if timeout_raw else DEFAULT_REQUEST_TIMEOUT
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_REQUEST_TIMEOUT} must be a number, got {timeout_raw!r}") from exc

    return ClientConfig(
        api_key=api_key,
        base_url=(merged.get(ENV_BASE_URL) or DEFAULT_BASE_URL).rstrip("/"),
        workflow_url=(merged.get(ENV_WORKFLOW_URL) or "").rstrip("/") or None,
        request_timeout=request_timeout,
    )


__all__ = [
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_REQUEST_TIMEOUT",
    "MIN_POLL_INTERVAL_MS",
    "load_config",
    "read_env_file",
]
