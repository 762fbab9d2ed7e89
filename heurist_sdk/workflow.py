"""Workflow task lifecycle: resource negotiation, submission, polling, cancel."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_REQUEST_TIMEOUT, MIN_POLL_INTERVAL_MS, ClientConfig
from .credentials import Credential, parse_api_key
from .errors import APIError, ConfigurationError, PollingStoppedError, WorkflowTimeoutError
from .http import new_session, post_json, response_json
from .tasks import DEFAULT_JOB_ID_PREFIX, TaskStatus, WorkflowTask, WorkflowTaskType, task_payload

logger = logging.getLogger(__name__)

DEFAULT_WAIT_TIMEOUT_MS = 300_000
DEFAULT_POLL_INTERVAL_MS = 10_000
JOB_ID_SUFFIX_LENGTH = 10


@dataclass(frozen=True)
class TaskResult:
    task_id: str
    status: TaskStatus
    result: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TaskResult":
        raw_status = payload.get("status")
        try:
            status = TaskStatus(raw_status)
        except ValueError as exc:
            raise APIError(
                f"Unknown task status: {raw_status!r}",
                error_type="decode_error",
                endpoint="task_result_query",
            ) from exc
        return cls(task_id=str(payload.get("task_id", "")), status=status, result=payload.get("result"))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"task_id": self.task_id, "status": self.status.value}
        if self.result is not None:
            data["result"] = self.result
        return data


@dataclass(frozen=True)
class CancelResult:
    task_id: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"task_id": self.task_id, "message": self.message}


def generate_job_id(prefix: Optional[str] = None) -> str:
    return f"{prefix or DEFAULT_JOB_ID_PREFIX}-{uuid.uuid4().hex[:JOB_ID_SUFFIX_LENGTH]}"


def _required_field(payload: Dict[str, Any], name: str, endpoint: str) -> str:
    value = payload.get(name)
    if value is None or value == "":
        raise APIError(f"Response from {endpoint} is missing {name}", error_type="decode_error", endpoint=endpoint)
    return str(value)


class WorkflowClient:
    """Drives workflow tasks on the remote network.

    The client keeps only immutable settings and a ``requests.Session`` after
    construction, so one instance can serve several threads at once.
    """

    def __init__(
        self,
        api_key: str,
        workflow_url: str,
        *,
        session: Optional[requests.Session] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        min_poll_interval_ms: int = MIN_POLL_INTERVAL_MS,
    ) -> None:
        if not api_key:
            raise ConfigurationError("An API key is required to use the workflow client")
        if not workflow_url:
            raise ConfigurationError("A workflow URL is required to use the workflow client")
        self.workflow_url = workflow_url.rstrip("/")
        self.session = session or new_session()
        self.request_timeout = request_timeout
        self.min_poll_interval_ms = min_poll_interval_ms
        self._credential: Credential = parse_api_key(api_key)

    @classmethod
    def from_config(cls, config: ClientConfig, session: Optional[requests.Session] = None) -> "WorkflowClient":
        if not config.workflow_url:
            raise ConfigurationError(
                "No workflow URL configured; set HEURIST_WORKFLOW_URL or pass workflow_url explicitly"
            )
        return cls(
            config.api_key,
            config.workflow_url,
            session=session,
            request_timeout=config.request_timeout,
            min_poll_interval_ms=config.min_poll_interval_ms,
        )

    @property
    def default_tenant_id(self) -> str:
        return self._credential.tenant_id

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    def resource_request(
        self,
        tenant_id: str,
        workflow_id: Optional[str] = None,
        task_type: Optional[WorkflowTaskType] = None,
    ) -> str:
        """Reserve compute for an upcoming task and return the allocation id."""

        data: Dict[str, Any] = {"consumer_id": tenant_id, "api_key": self._credential.secret_key}
        if workflow_id is not None:
            data["workflow_id"] = workflow_id
        if task_type is not None:
            data["task_type"] = WorkflowTaskType(task_type).value
        payload = self._post("resource_request", data)
        miner_id = _required_field(payload, "miner_id", "resource_request")
        logger.debug("Resource allocated for %s: %s", tenant_id, miner_id)
        return miner_id

    def create_task(self, task: WorkflowTask) -> str:
        """Submit ``task`` and return the service-assigned task id.

        The effective tenant id and secret key are the task's own values when
        set, else the client's; the task itself is never modified.
        """

        task_type, task_details = task_payload(task)
        job_id = generate_job_id(task.job_id_prefix)
        data: Dict[str, Any] = {
            "consumer_id": task.tenant_id or self._credential.tenant_id,
            "api_key": task.secret_key or self._credential.secret_key,
            "task_type": task_type.value,
            "task_details": task_details,
            "job_id": job_id,
        }
        if task.workflow_id is not None:
            data["workflow_id"] = task.workflow_id
        if task.timeout_seconds:
            data["timeout_seconds"] = task.timeout_seconds
        payload = self._post("task_create", data)
        task_id = _required_field(payload, "task_id", "task_create")
        logger.info("Created %s task %s", task_type.value, task_id, extra={"task_id": task_id, "job_id": job_id})
        return task_id

    def query_task_result(self, task_id: str) -> TaskResult:
        payload = self._post("task_result_query", {"task_id": task_id, "api_key": self._credential.secret_key})
        return TaskResult.from_payload(payload)

    def cancel_task(self, task_id: str) -> CancelResult:
        """Ask the service to cancel a task. Best effort; no local state changes."""

        payload = self._post("task_cancel", {"task_id": task_id, "api_key": self._credential.secret_key})
        message = payload.get("message") or payload.get("msg") or ""
        logger.info("Cancel requested for %s: %s", task_id, message, extra={"task_id": task_id})
        return CancelResult(task_id=str(payload.get("task_id", task_id)), message=str(message))

    # ------------------------------------------------------------------
    # Composite operations
    # ------------------------------------------------------------------

    def execute_workflow(self, task: WorkflowTask) -> str:
        """Request a resource for ``task`` and then submit it."""

        task_type, _ = task_payload(task)
        self.resource_request(
            task.tenant_id or self._credential.tenant_id,
            task.workflow_id,
            task_type,
        )
        return self.create_task(task)

    def execute_workflow_and_wait_for_result(
        self,
        task: WorkflowTask,
        timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        stop_event: Optional[threading.Event] = None,
    ) -> TaskResult:
        """Submit ``task`` and poll until it finishes, fails or is canceled.

        ``timeout_ms`` counts from this call. When it runs out a
        ``WorkflowTimeoutError`` is raised and the remote task keeps running.
        Setting ``stop_event`` stops polling with ``PollingStoppedError``.
        """

        if interval_ms < self.min_poll_interval_ms:
            raise ConfigurationError(
                f"Interval should be at least {self.min_poll_interval_ms} ms, got {interval_ms}"
            )

        start = time.monotonic()
        timeout_s = timeout_ms / 1000.0
        interval_s = interval_ms / 1000.0

        task_id = self.execute_workflow(task)
        last_status: Optional[TaskStatus] = None
        while True:
            if stop_event is not None and stop_event.is_set():
                raise PollingStoppedError(task_id)

            result = self.query_task_result(task_id)
            if result.status is not last_status:
                logger.info("Task %s is %s", task_id, result.status.value, extra={"task_id": task_id})
                last_status = result.status
            if result.status.is_terminal:
                return result

            elapsed = time.monotonic() - start
            if elapsed > timeout_s:
                logger.warning("Timed out waiting for task %s after %.1fs", task_id, elapsed)
                raise WorkflowTimeoutError(task_id, timeout_ms)

            delay = min(interval_s, max(0.0, timeout_s - elapsed))
            if stop_event is not None:
                if stop_event.wait(delay):
                    raise PollingStoppedError(task_id)
            else:
                time.sleep(delay)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _post(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.workflow_url}/{endpoint}"
        logger.debug("POST %s", url)
        resp = post_json(self.session, url, data, timeout=self.request_timeout, endpoint=endpoint)
        return response_json(resp, endpoint)


__all__ = [
    "CancelResult",
    "DEFAULT_POLL_INTERVAL_MS",
    "DEFAULT_WAIT_TIMEOUT_MS",
    "TaskResult",
    "WorkflowClient",
    "generate_job_id",
]
