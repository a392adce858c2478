"""
s6-overlay supervision records for worker containers.

Records are computed here without touching the filesystem; see emit.py
for writing them out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

S6_RC_DIR = "/etc/s6-overlay/s6-rc.d"
APP_DIR = "/var/www/html"
SCRIPT_PREAMBLE = "#!/command/with-contenv bash"
RUN_PREAMBLE = "#!/command/execlineb -P"
LONGRUN = "longrun"

HORIZON_TASK = "laravel-horizon"
HORIZON_COMMAND = "php artisan horizon"
SCHEDULER_TASK = "laravel-scheduler"
SCHEDULER_COMMAND = "php artisan schedule:work"


@dataclass
class WorkerTaskSpec:
    name: str
    command: str
    dependencies: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SupervisionRecord:
    """One long-running service in the s6 tree, identified by name."""
    name: str
    script: str
    run: str
    dependencies: str = ""
    type: str = LONGRUN
    autostart: bool = True


def script_body(command: str) -> str:
    return f"{SCRIPT_PREAMBLE}\ncd {APP_DIR}\n{command}"


def run_body(name: str) -> str:
    return f"{RUN_PREAMBLE}\n{S6_RC_DIR}/{name}/script"


def _as_specs(tasks: Union[None, Mapping[str, Mapping], Iterable[WorkerTaskSpec]]) -> List[WorkerTaskSpec]:
    if not tasks:
        return []
    if isinstance(tasks, Mapping):
        return [
            WorkerTaskSpec(name=name, command=cfg["command"], dependencies=list(cfg.get("dependencies") or []))
            for name, cfg in tasks.items()
        ]
    return list(tasks)


def merge_tasks(
    tasks: Union[None, Mapping[str, Mapping], Iterable[WorkerTaskSpec]],
    horizon: bool = False,
    scheduler: bool = False,
) -> Dict[str, WorkerTaskSpec]:
    """
    Builtin tasks first, then declared tasks by name.

    A declared task named like a builtin replaces it but keeps its position.
    """
    merged: Dict[str, WorkerTaskSpec] = {}

    if horizon:
        merged[HORIZON_TASK] = WorkerTaskSpec(name=HORIZON_TASK, command=HORIZON_COMMAND)
    if scheduler:
        merged[SCHEDULER_TASK] = WorkerTaskSpec(name=SCHEDULER_TASK, command=SCHEDULER_COMMAND)

    for spec in _as_specs(tasks):
        merged[spec.name] = spec

    return merged


def build_record(spec: WorkerTaskSpec) -> SupervisionRecord:
    # dependency names are not checked against declared tasks
    return SupervisionRecord(
        name=spec.name,
        script=script_body(spec.command),
        run=run_body(spec.name),
        dependencies="\n".join(spec.dependencies or []),
    )


def build_supervision_records(
    tasks: Union[None, Mapping[str, Mapping], Iterable[WorkerTaskSpec]] = None,
    horizon: bool = False,
    scheduler: bool = False,
) -> List[SupervisionRecord]:
    """
    Build the supervision records for one worker.

    Args:
        tasks: Declared tasks, as WorkerTaskSpec objects or a name -> {command, dependencies} mapping
        horizon: Add the laravel-horizon task
        scheduler: Add the laravel-scheduler task

    Returns:
        List of records in insertion order
    """
    return [build_record(spec) for spec in merge_tasks(tasks, horizon, scheduler).values()]


def find_record(records: Iterable[SupervisionRecord], name: str) -> Optional[SupervisionRecord]:
    return next((r for r in records if r.name == name), None)
