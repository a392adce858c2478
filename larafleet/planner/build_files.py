"""
Build-directory files consumed by the image build step.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEPLOY_SCRIPT_NAME = "60-deploy.sh"
NOOP_DEPLOY_SCRIPT = "#!/bin/sh\nexit 0\n"


def relative_to_app(path: Union[str, Path], app_path: Union[str, Path]) -> str:
    return os.path.relpath(Path(path).resolve(), Path(app_path).resolve())


def prepare_deployment_script(app_path: Union[str, Path], script: Optional[str], deploy_dir: Union[str, Path]) -> Path:
    """
    Place the deployment hook run at container start.

    The operator's script is copied when it exists; otherwise a no-op
    script is written.
    """
    deploy_dir = Path(deploy_dir)
    deploy_dir.mkdir(parents=True, exist_ok=True)
    dst = deploy_dir / DEPLOY_SCRIPT_NAME

    if script:
        src = Path(app_path) / script
        if src.exists():
            shutil.copyfile(src, dst)
            dst.chmod(0o755)
            logger.info(f"Using deployment script {src}")
            return dst
        logger.warning(f"Deployment script {src} not found; using a no-op script")

    dst.write_text(NOOP_DEPLOY_SCRIPT)
    dst.chmod(0o755)
    return dst


def find_dockerignore(context: Union[str, Path], dockerfile: str = "Dockerfile") -> Optional[Path]:
    """<dockerfile>.dockerignore wins over .dockerignore, as with BuildKit."""
    context = Path(context)
    for candidate in (context / f"{Path(dockerfile).name}.dockerignore", context / ".dockerignore"):
        if candidate.exists():
            return candidate
    return None


def ensure_dockerignore_allows_build(context: Union[str, Path], build_path: Union[str, Path], dockerfile: str = "Dockerfile") -> bool:
    """
    Re-include the build directory in the image context.

    Returns:
        True if the ignore file was changed
    """
    ignore = find_dockerignore(context, dockerfile)
    if ignore is None:
        return False

    rule = f"!{relative_to_app(build_path, context)}"
    lines = ignore.read_text().split("\n")
    if rule in lines:
        return False

    ignore.write_text("\n".join(lines + ["", "# larafleet", rule]))
    logger.info(f"Added {rule} to {ignore}")
    return True
