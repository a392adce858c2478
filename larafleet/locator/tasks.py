"""
Running ECS task snapshots.

A TaskInstance is a best-effort snapshot: the task may stop between
listing and use.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from larafleet.errors import NoRunningTasksError

DESCRIBE_BATCH = 100  # DescribeTasks limit


@dataclass
class TaskInstance:
    task_arn: str
    container_name: str
    last_status: str
    task_definition_arn: str = ""
    cluster_arn: str = ""

    @property
    def task_id(self) -> str:
        return self.task_arn.split("/")[-1]

    @property
    def label(self) -> str:
        return f"{self.container_name} ({self.task_id[:8]}...) - {self.last_status}"

    @classmethod
    def from_description(cls, task: Dict[str, Any], cluster_arn: str = "") -> "TaskInstance":
        containers = task.get("containers") or [{}]
        return cls(
            task_arn=task.get("taskArn", ""),
            container_name=containers[0].get("name") or "unknown",
            last_status=task.get("lastStatus") or "unknown",
            task_definition_arn=task.get("taskDefinitionArn", ""),
            cluster_arn=task.get("clusterArn", cluster_arn),
        )


def list_running_task_arns(ecs, cluster_arn: str) -> List[str]:
    arns: List[str] = []
    paginator = ecs.get_paginator("list_tasks")
    for page in paginator.paginate(cluster=cluster_arn, desiredStatus="RUNNING"):
        arns.extend(page.get("taskArns", []))
    return arns


def describe_running_tasks(ecs, cluster_arn: str) -> List[TaskInstance]:
    """
    Describe every running task in the cluster.

    Raises:
        NoRunningTasksError: If the cluster has no running tasks
    """
    arns = list_running_task_arns(ecs, cluster_arn)
    if not arns:
        raise NoRunningTasksError(f"No running tasks found in cluster {cluster_arn.split('/')[-1]}")

    tasks: List[TaskInstance] = []
    for i in range(0, len(arns), DESCRIBE_BATCH):
        response = ecs.describe_tasks(cluster=cluster_arn, tasks=arns[i:i + DESCRIBE_BATCH])
        tasks.extend(TaskInstance.from_description(t, cluster_arn) for t in response.get("tasks", []))

    if not tasks:
        raise NoRunningTasksError(f"No running tasks found in cluster {cluster_arn.split('/')[-1]}")
    return tasks
