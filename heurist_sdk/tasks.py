"""Workflow task variants and their wire payloads.

Every task is a frozen value object. ``task_payload`` is the single place that
maps a variant to its ``task_type`` tag and ``task_details`` payload, so the
set of task kinds stays closed and the payload is a pure function of the
task's own fields.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

DEFAULT_JOB_ID_PREFIX = "sdk-workflow"
MAX_SEED = 2**31 - 1

# Values the service applies when a Text2VideoTask leaves them out.
TEXT2VIDEO_SERVICE_DEFAULTS: Dict[str, int] = {
    "width": 848,
    "height": 480,
    "length": 37,
    "steps": 30,
    "fps": 24,
    "quality": 80,
}


class WorkflowTaskType(str, Enum):
    UPSCALER = "upscaler"
    FLUX_LORA = "flux-lora"
    TEXT2VIDEO = "txt2vid"


class TaskStatus(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.FINISHED, TaskStatus.FAILED, TaskStatus.CANCELED})


def _random_seed() -> int:
    return random.randint(0, MAX_SEED)


@dataclass(frozen=True, kw_only=True)
class TaskOptions:
    """Attributes shared by every task variant.

    ``tenant_id`` and ``secret_key`` override the client's own credential for
    this one submission.
    """

    tenant_id: Optional[str] = None
    job_id_prefix: str = DEFAULT_JOB_ID_PREFIX
    timeout_seconds: Optional[int] = None
    workflow_id: Optional[str] = None
    secret_key: Optional[str] = field(default=None, repr=False)

    @property
    def task_type(self) -> WorkflowTaskType:
        return task_payload(self)[0]  # type: ignore[arg-type]

    @property
    def task_details(self) -> Dict[str, Any]:
        return task_payload(self)[1]  # type: ignore[arg-type]


@dataclass(frozen=True, kw_only=True)
class UpscalerTask(TaskOptions):
    image_url: str


@dataclass(frozen=True, kw_only=True)
class FluxLoraTask(TaskOptions):
    prompt: str
    lora_name: str
    aspect_ratio: str = "custom"
    width: int = 1024
    height: int = 1024
    guidance: float = 6
    steps: int = 20


@dataclass(frozen=True, kw_only=True)
class Text2VideoTask(TaskOptions):
    prompt: str
    width: Optional[int] = None
    height: Optional[int] = None
    length: Optional[int] = None
    steps: Optional[int] = None
    seed: int = field(default_factory=_random_seed)
    fps: Optional[int] = None
    quality: Optional[int] = None


WorkflowTask = Union[UpscalerTask, FluxLoraTask, Text2VideoTask]

_TEXT2VIDEO_OPTIONAL = ("width", "height", "length", "steps", "seed", "fps", "quality")


def task_payload(task: WorkflowTask) -> Tuple[WorkflowTaskType, Dict[str, Any]]:
    """Return ``(task_type, task_details)`` for a task variant."""

    if isinstance(task, UpscalerTask):
        return WorkflowTaskType.UPSCALER, {"parameters": {"image": task.image_url}}

    if isinstance(task, FluxLoraTask):
        parameters = {
            "prompt": task.prompt,
            "aspect_ratio": task.aspect_ratio,
            "width": task.width,
            "height": task.height,
            "guidance": task.guidance,
            "steps": task.steps,
            "lora_name": task.lora_name,
        }
        return WorkflowTaskType.FLUX_LORA, {"parameters": parameters}

    if isinstance(task, Text2VideoTask):
        parameters: Dict[str, Any] = {"prompt": task.prompt}
        for name in _TEXT2VIDEO_OPTIONAL:
            value = getattr(task, name)
            if value is not None:
                parameters[name] = value
        return WorkflowTaskType.TEXT2VIDEO, {"parameters": parameters}

    raise TypeError(f"Unsupported workflow task: {type(task).__name__}")


__all__ = [
    "DEFAULT_JOB_ID_PREFIX",
    "TEXT2VIDEO_SERVICE_DEFAULTS",
    "TERMINAL_STATUSES",
    "FluxLoraTask",
    "TaskOptions",
    "TaskStatus",
    "Text2VideoTask",
    "UpscalerTask",
    "WorkflowTask",
    "WorkflowTaskType",
    "task_payload",
]
