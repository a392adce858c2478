"""
Task selection: match a service hint, otherwise ask the operator.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import questionary

from larafleet.errors import NoRunningTasksError, SelectionCancelled
from .tasks import TaskInstance, describe_running_tasks

logger = logging.getLogger(__name__)

TaskChooser = Callable[[str, List[TaskInstance]], Optional[TaskInstance]]

DEFAULT_PROMPT = "Select a task to connect to:"


def service_prefix(service: str) -> str:
    if service == "web":
        return "-web"
    if service == "worker":
        return "-worker"
    return f"-{service}"


def match_task(tasks: List[TaskInstance], service: Optional[str]) -> Optional[TaskInstance]:
    """First task whose container name contains the hint's prefix, case-insensitive."""
    if not service:
        return None
    prefix = service_prefix(service).lower()
    return next((t for t in tasks if prefix in t.container_name.lower()), None)


def questionary_chooser(prompt: str, tasks: List[TaskInstance]) -> Optional[TaskInstance]:
    """Blocks until the operator picks a task; None when cancelled."""
    choices = [questionary.Choice(title=t.label, value=t, description=f"Task: {t.task_id}") for t in tasks]
    return questionary.select(prompt, choices=choices).ask()


def choose_task(tasks: List[TaskInstance], chooser: Optional[TaskChooser] = None, prompt: str = DEFAULT_PROMPT) -> TaskInstance:
    if not tasks:
        raise NoRunningTasksError("No tasks available to select from.")

    chosen = (chooser or questionary_chooser)(prompt, list(tasks))
    if chosen is None:
        raise SelectionCancelled("Task selection cancelled")
    return chosen


def locate_task(
    ecs,
    cluster_arn: str,
    service: Optional[str] = None,
    chooser: Optional[TaskChooser] = None,
    prompt: str = DEFAULT_PROMPT,
) -> TaskInstance:
    """
    Resolve one running task in the cluster.

    Args:
        ecs: boto3 ECS client
        cluster_arn: Cluster to search
        service: Optional hint ("web", "worker" or a worker name)
        chooser: Called with (prompt, tasks) when the hint does not resolve a task
        prompt: Message shown by the chooser

    Returns:
        The matched or chosen task

    Raises:
        NoRunningTasksError: If the cluster has no running tasks
        SelectionCancelled: If the operator cancels the selection
    """
    tasks = describe_running_tasks(ecs, cluster_arn)

    matched = match_task(tasks, service)
    if matched is not None:
        logger.info(f"Matched task {matched.task_id} ({matched.container_name}) for service {service}")
        return matched

    if service:
        logger.warning(f"No running task found matching service: {service}")
    return choose_task(tasks, chooser, prompt)
