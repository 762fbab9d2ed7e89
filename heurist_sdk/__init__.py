"""Python client for the Heurist compute network."""

from __future__ import annotations

import logging

from .client import Heurist  # noqa: F401
from .config import ClientConfig, load_config  # noqa: F401
from .credentials import Credential, parse_api_key  # noqa: F401
from .errors import (  # noqa: F401
    APIError,
    ConfigurationError,
    HeuristError,
    PollingStoppedError,
    WorkflowTimeoutError,
)
from .images import Image, ImageGenerateParams, Images  # noqa: F401
from .tasks import (  # noqa: F401
    FluxLoraTask,
    TaskStatus,
    Text2VideoTask,
    UpscalerTask,
    WorkflowTask,
    WorkflowTaskType,
    task_payload,
)
from .workflow import CancelResult, TaskResult, WorkflowClient  # noqa: F401

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "CancelResult",
    "ClientConfig",
    "ConfigurationError",
    "Credential",
    "FluxLoraTask",
    "Heurist",
    "HeuristError",
    "Image",
    "ImageGenerateParams",
    "Images",
    "PollingStoppedError",
    "TaskResult",
    "TaskStatus",
    "Text2VideoTask",
    "UpscalerTask",
    "WorkflowClient",
    "WorkflowTask",
    "WorkflowTaskType",
    "WorkflowTimeoutError",
    "load_config",
    "parse_api_key",
    "task_payload",
]
