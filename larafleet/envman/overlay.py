"""
Environment overlay file consumed by the image build step.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)


def prepare_environment_file(app_path: Union[str, Path], env_file: Optional[str], deploy_dir: Union[str, Path]) -> Optional[Path]:
    """
    Copy the operator's env file into the deploy directory as `.env`.

    Args:
        app_path: Application root the env file is relative to
        env_file: Env file name (e.g. ".env.production"), or None
        deploy_dir: Build directory for deployment files

    Returns:
        Path of the overlay file, or None when no env file is configured
    """
    if not env_file:
        return None

    deploy_dir = Path(deploy_dir)
    deploy_dir.mkdir(parents=True, exist_ok=True)
    dst = deploy_dir / ".env"
    src = Path(app_path) / env_file

    if src.exists():
        shutil.copyfile(src, dst)
        dst.chmod(0o755)
        logger.info(f"Copied {src} to {dst}")
    else:
        dst.write_text("")
        logger.warning(f"Environment file {src} not found; starting from an empty overlay")

    return dst


def quote_value(value: str) -> str:
    """Double-quote values dotenv would otherwise split or misread."""
    if not any(c in value for c in "\n\r\"\\"):
        return value
    escaped = value.replace("\\", "\\\\").replace("\"", "\\\"").replace("\r", "\\r").replace("\n", "\\n")
    return f'"{escaped}"'


def unquote_value(value: str) -> str:
    if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
        return value
    escapes = {"n": "\n", "r": "\r", "\"": "\"", "\\": "\\"}
    out = []
    chars = iter(value[1:-1])
    for c in chars:
        if c == "\\":
            nxt = next(chars, "")
            out.append(escapes.get(nxt, "\\" + nxt))
        else:
            out.append(c)
    return "".join(out)


def append_overlay(path: Union[str, Path], env: Mapping[str, str]) -> int:
    """
    Append KEY=value lines to the overlay file.

    Values holding newlines, quotes or backslashes are double-quoted with
    escapes so every pair stays on one line.
    Not idempotent: a second call appends the same lines again.

    Returns:
        Number of lines appended
    """
    if not env:
        return 0

    content = "\n".join(f"{k}={quote_value(str(v))}" for k, v in env.items())
    with open(path, "a") as f:
        f.write("\n" + content)
    return len(env)


def parse_overlay(path: Union[str, Path]) -> dict:
    """Read KEY=value pairs back from an overlay file; later lines win."""
    values = {}
    for line in Path(path).read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        values[k.strip()] = unquote_value(v)
    return values
