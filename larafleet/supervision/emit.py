"""
Write supervision records to the worker build directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Union

from .records import SupervisionRecord

logger = logging.getLogger(__name__)

S6_RC_RELATIVE = Path("etc/s6-overlay/s6-rc.d")
CONTENTS_RELATIVE = Path("user/contents.d")
EXECUTABLE = 0o755


def s6_rc_dir(build_path: Union[str, Path]) -> Path:
    return Path(build_path) / S6_RC_RELATIVE


def write_supervision_tree(records: Iterable[SupervisionRecord], build_path: Union[str, Path]) -> List[Path]:
    """
    Emit one s6-rc service directory per record plus its autostart marker.

    Args:
        records: Records from build_supervision_records
        build_path: Worker build directory

    Returns:
        List of written file paths
    """
    rc_dir = s6_rc_dir(build_path)
    contents_dir = rc_dir / CONTENTS_RELATIVE
    contents_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for record in records:
        task_dir = rc_dir / record.name
        task_dir.mkdir(parents=True, exist_ok=True)

        script = task_dir / "script"
        script.write_text(record.script)
        script.chmod(EXECUTABLE)

        run = task_dir / "run"
        run.write_text(record.run)
        run.chmod(EXECUTABLE)

        (task_dir / "type").write_text(record.type)
        (task_dir / "dependencies").write_text(record.dependencies)
        written.extend([script, run, task_dir / "type", task_dir / "dependencies"])

        if record.autostart:
            marker = contents_dir / record.name
            marker.write_text("")
            written.append(marker)

        logger.debug(f"Wrote s6 service {record.name} to {task_dir}")

    return written
