"""Tests for the heurist-workflow command line."""

from __future__ import annotations

import io
import json
import logging
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch


ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from heurist_sdk import cli as cli_module
from heurist_sdk.config import ClientConfig
from heurist_sdk.errors import APIError, ConfigurationError
from heurist_sdk.logging_utils import LOGGER_NAME
from heurist_sdk.tasks import FluxLoraTask, TaskStatus, Text2VideoTask, UpscalerTask
from heurist_sdk.workflow import CancelResult, TaskResult, WorkflowClient

CONFIG = ClientConfig(api_key="tenant#secret", workflow_url="http://workflow.test")


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch.object(cli_module, "load_config", return_value=CONFIG)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                logger.removeHandler(handler)
                handler.close()
        logger.propagate = True

    def _run(self, *argv: str):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli_module.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_run_prints_task_id(self) -> None:
        with patch.object(WorkflowClient, "execute_workflow", return_value="task-7") as execute:
            code, out, _ = self._run("run", "upscaler", "--image-url", "https://example.com/a.png")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "task-7")
        self.assertEqual(execute.call_args.args[0], UpscalerTask(image_url="https://example.com/a.png"))

    def test_run_flux_lora_builds_task_from_options(self) -> None:
        with patch.object(WorkflowClient, "execute_workflow", return_value="task-8") as execute:
            self._run(
                "run", "flux-lora", "--prompt", "a fox", "--lora-name", "openflux",
                "--steps", "12", "--workflow-id", "wf-1", "--task-timeout", "60",
            )
        task = execute.call_args.args[0]
        self.assertEqual(
            task,
            FluxLoraTask(prompt="a fox", lora_name="openflux", steps=12, workflow_id="wf-1", timeout_seconds=60),
        )

    def test_run_wait_prints_result_and_exit_status(self) -> None:
        finished = TaskResult("task-9", TaskStatus.FINISHED, {"url": "https://cdn.test/v.mp4"})
        failed = TaskResult("task-9", TaskStatus.FAILED, "oom")
        argv = ("run", "txt2vid", "--prompt", "waves", "--seed", "5", "--wait", "--interval-ms", "2000")
        with patch.object(WorkflowClient, "execute_workflow_and_wait_for_result", return_value=finished) as wait:
            code, out, _ = self._run(*argv)
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["result"], {"url": "https://cdn.test/v.mp4"})
        self.assertEqual(wait.call_args.args[0], Text2VideoTask(prompt="waves", seed=5))
        self.assertEqual(wait.call_args.kwargs["interval_ms"], 2000)

        with patch.object(WorkflowClient, "execute_workflow_and_wait_for_result", return_value=failed):
            code, _, _ = self._run(*argv)
        self.assertEqual(code, 2)

    def test_status_and_cancel(self) -> None:
        with patch.object(WorkflowClient, "query_task_result", return_value=TaskResult("t", TaskStatus.RUNNING)):
            code, out, _ = self._run("status", "t")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"task_id": "t", "status": "running"})

        with patch.object(WorkflowClient, "cancel_task", return_value=CancelResult("t", "Task canceled")):
            code, out, _ = self._run("cancel", "t")
        self.assertEqual(json.loads(out), {"task_id": "t", "message": "Task canceled"})

    def test_api_error_exits_with_message(self) -> None:
        with patch.object(WorkflowClient, "cancel_task", side_effect=APIError("overloaded", 500, "server_error")):
            code, _, err = self._run("cancel", "t")
        self.assertEqual(code, 1)
        self.assertIn("overloaded", err)

    def test_unknown_log_level_is_usage_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("--log-level", "LOUD", "status", "t")
        self.assertEqual(ctx.exception.code, 2)

    def test_log_level_is_case_insensitive(self) -> None:
        with patch.object(WorkflowClient, "query_task_result", return_value=TaskResult("t", TaskStatus.WAITING)):
            code, _, _ = self._run("--log-level", "debug", "status", "t")
        self.assertEqual(code, 0)
        self.assertEqual(logging.getLogger(LOGGER_NAME).level, logging.DEBUG)

    def test_task_options_are_checked_before_configuration(self) -> None:
        with patch.object(cli_module, "load_config", side_effect=ConfigurationError("no key")) as load_mock:
            with self.assertRaises(SystemExit) as ctx:
                self._run("run", "txt2vid")
        self.assertEqual(ctx.exception.code, 2)
        load_mock.assert_not_called()

    def test_missing_required_option_is_usage_error(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("run", "flux-lora", "--prompt", "a fox")
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
