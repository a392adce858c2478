from .tasks import TaskInstance, describe_running_tasks
from .clusters import cluster_pattern, locate_cluster, find_cluster_arn
from .select import service_prefix, match_task, choose_task, locate_task
from .attach import task_log_group, ssh_command, tail_logs_command, run_aws

__all__ = [
    "TaskInstance",
    "describe_running_tasks",
    "cluster_pattern",
    "locate_cluster",
    "find_cluster_arn",
    "service_prefix",
    "match_task",
    "choose_task",
    "locate_task",
    "task_log_group",
    "ssh_command",
    "tail_logs_command",
    "run_aws",
]
