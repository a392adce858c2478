from .records import (
    WorkerTaskSpec,
    SupervisionRecord,
    build_supervision_records,
    merge_tasks,
    find_record,
    HORIZON_TASK,
    SCHEDULER_TASK,
)
from .emit import write_supervision_tree, s6_rc_dir

__all__ = [
    "WorkerTaskSpec",
    "SupervisionRecord",
    "build_supervision_records",
    "merge_tasks",
    "find_record",
    "HORIZON_TASK",
    "SCHEDULER_TASK",
    "write_supervision_tree",
    "s6_rc_dir",
]
