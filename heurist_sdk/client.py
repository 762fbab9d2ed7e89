"""Top-level Heurist client."""

from __future__ import annotations

from typing import Optional

import requests

from .config import ClientConfig, load_config
from .errors import ConfigurationError
from .http import new_session
from .images import Images
from .workflow import WorkflowClient


class Heurist:
    """Entry point bundling the resources that share one configuration.

    With no ``config`` and no ``api_key`` the configuration is read from the
    ``HEURIST_*`` environment variables. Passing ``api_key`` without a
    ``config`` skips the environment entirely, so ``HEURIST_BASE_URL`` and
    ``HEURIST_WORKFLOW_URL`` are ignored; pass ``base_url``/``workflow_url``
    too, or build the config with ``load_config``. Explicit keyword values
    always win.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        workflow_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if config is None:
            config = ClientConfig(api_key=api_key) if api_key else load_config()
        config = config.with_overrides(api_key=api_key, base_url=base_url, workflow_url=workflow_url)
        if not config.api_key:
            raise ConfigurationError("An API key is required to use the Heurist client")
        self.config = config
        self.session = session or new_session()
        self.images = Images(config, self.session)
        self._workflow: Optional[WorkflowClient] = (
            WorkflowClient.from_config(config, self.session) if config.workflow_url else None
        )

    @property
    def workflow(self) -> WorkflowClient:
        if self._workflow is None:
            raise ConfigurationError(
                "No workflow URL configured; set HEURIST_WORKFLOW_URL or pass workflow_url explicitly"
            )
        return self._workflow

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Heurist":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["Heurist"]
