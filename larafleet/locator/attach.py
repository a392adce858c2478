"""
Log group lookup and AWS CLI invocations for attaching to a task.
"""

from __future__ import annotations

import os
import subprocess
from typing import List

from larafleet.errors import ConfigurationError, UnsupportedLogDriverError
from .tasks import TaskInstance

STREAMING_LOG_DRIVER = "awslogs"


def task_log_group(ecs, task: TaskInstance) -> str:
    """
    CloudWatch log group of the task's first container.

    Raises:
        ConfigurationError: If the task has no definition or group
        UnsupportedLogDriverError: If the container does not log with awslogs
    """
    if not task.task_definition_arn:
        raise ConfigurationError("Could not find task definition ARN")

    response = ecs.describe_task_definition(taskDefinition=task.task_definition_arn)
    containers = response.get("taskDefinition", {}).get("containerDefinitions") or [{}]
    log_config = containers[0].get("logConfiguration")

    if not log_config or log_config.get("logDriver") != STREAMING_LOG_DRIVER:
        raise UnsupportedLogDriverError("Task does not use CloudWatch Logs (awslogs driver)")

    group = (log_config.get("options") or {}).get("awslogs-group")
    if not group:
        raise ConfigurationError("Could not determine CloudWatch log group")
    return group


def ssh_command(cluster_arn: str, task: TaskInstance, shell: str = "/bin/bash") -> List[str]:
    return [
        "aws", "ecs", "execute-command",
        "--cluster", cluster_arn,
        "--task", task.task_id,
        "--container", task.container_name,
        "--interactive",
        "--command", shell,
    ]


def tail_logs_command(log_group: str, since: str = "10m", follow: bool = True) -> List[str]:
    cmd = ["aws", "logs", "tail", log_group, "--since", since]
    if follow:
        cmd.append("--follow")
    return cmd


def run_aws(cmd: List[str], region: str) -> int:
    """Run an AWS CLI command attached to the terminal; returns its exit code."""
    env = {**os.environ, "AWS_REGION": region}
    return subprocess.run(cmd, env=env, check=False).returncode
