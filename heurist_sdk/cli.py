"""Command-line front end for the workflow client.

Usage:
    heurist-workflow run txt2vid --prompt "a calm ocean at sunset" --wait
    heurist-workflow status <task_id>
    heurist-workflow cancel <task_id>
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .client import Heurist
from .config import load_config
from .errors import HeuristError
from .logging_utils import setup_logging
from .tasks import FluxLoraTask, TaskStatus, Text2VideoTask, UpscalerTask, WorkflowTask, WorkflowTaskType
from .workflow import DEFAULT_POLL_INTERVAL_MS, DEFAULT_WAIT_TIMEOUT_MS

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_TASK_FAILED = 2

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="heurist-workflow", description="Submit and track Heurist workflow tasks")
    parser.add_argument("--env-file", default=None, help="Read HEURIST_* settings from this .env file")
    parser.add_argument("--workflow-url", default=None, help="Workflow service URL (overrides HEURIST_WORKFLOW_URL)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--log-file", default=None, help="Also write JSON log lines to this file")
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", help="Request a resource and submit a task")
    run.add_argument("kind", choices=[t.value for t in WorkflowTaskType], help="Task type")
    run.add_argument("--prompt", default=None)
    run.add_argument("--image-url", default=None, help="Source image (upscaler)")
    run.add_argument("--lora-name", default=None, help="LoRA to apply (flux-lora)")
    run.add_argument("--aspect-ratio", default=None)
    run.add_argument("--width", type=int, default=None)
    run.add_argument("--height", type=int, default=None)
    run.add_argument("--guidance", type=float, default=None)
    run.add_argument("--steps", type=int, default=None)
    run.add_argument("--length", type=int, default=None)
    run.add_argument("--seed", type=int, default=None)
    run.add_argument("--fps", type=int, default=None)
    run.add_argument("--quality", type=int, default=None)
    run.add_argument("--workflow-id", default=None)
    run.add_argument("--job-id-prefix", default=None)
    run.add_argument("--task-timeout", type=int, default=None, help="Server-side timeout in seconds")
    run.add_argument("--wait", action="store_true", help="Poll until the task finishes")
    run.add_argument("--timeout-ms", type=int, default=DEFAULT_WAIT_TIMEOUT_MS)
    run.add_argument("--interval-ms", type=int, default=DEFAULT_POLL_INTERVAL_MS)

    status = commands.add_parser("status", help="Show the current result of a task")
    status.add_argument("task_id")

    cancel = commands.add_parser("cancel", help="Ask the service to cancel a task")
    cancel.add_argument("task_id")
    return parser


def _present(args: argparse.Namespace, *names: str) -> Dict[str, Any]:
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def build_task(args: argparse.Namespace, parser: argparse.ArgumentParser) -> WorkflowTask:
    common = _present(args, "workflow_id", "job_id_prefix")
    if args.task_timeout is not None:
        common["timeout_seconds"] = args.task_timeout

    if args.kind == WorkflowTaskType.UPSCALER.value:
        if not args.image_url:
            parser.error("run upscaler requires --image-url")
        return UpscalerTask(image_url=args.image_url, **common)

    if not args.prompt:
        parser.error(f"run {args.kind} requires --prompt")

    if args.kind == WorkflowTaskType.FLUX_LORA.value:
        if not args.lora_name:
            parser.error("run flux-lora requires --lora-name")
        options = _present(args, "aspect_ratio", "width", "height", "guidance", "steps")
        return FluxLoraTask(prompt=args.prompt, lora_name=args.lora_name, **options, **common)

    options = _present(args, "width", "height", "length", "steps", "seed", "fps", "quality")
    return Text2VideoTask(prompt=args.prompt, **options, **common)


def _print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, default=str))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    task = build_task(args, parser) if args.command == "run" else None

    try:
        config = load_config(args.env_file)
        heurist = Heurist(config, workflow_url=args.workflow_url)
        workflow = heurist.workflow

        if args.command == "status":
            _print_json(workflow.query_task_result(args.task_id).to_dict())
            return EXIT_OK

        if args.command == "cancel":
            _print_json(workflow.cancel_task(args.task_id).to_dict())
            return EXIT_OK

        if not args.wait:
            print(workflow.execute_workflow(task))
            return EXIT_OK

        result = workflow.execute_workflow_and_wait_for_result(
            task, timeout_ms=args.timeout_ms, interval_ms=args.interval_ms
        )
        _print_json(result.to_dict())
        return EXIT_OK if result.status is TaskStatus.FINISHED else EXIT_TASK_FAILED
    except HeuristError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
