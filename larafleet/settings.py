"""
Configuration defaults read from the environment.
"""

import logging
import os
from pathlib import Path

DEFAULT_BUILD_PATH = ".sst/laravel"
DEFAULT_CONFIG_FILE = "larafleet.yaml"
DEFAULT_REGION = "us-east-1"


def get_build_path() -> Path:
    """
    Directory where plan generation writes build files for the image step.

    Returns:
        Path: Build directory (not created here)
    """
    return Path(os.environ.get("LARAFLEET_BUILD_PATH", DEFAULT_BUILD_PATH))


def get_config_path() -> Path:
    """Declaration file used when none is passed on the command line."""
    return Path(os.environ.get("LARAFLEET_CONFIG", DEFAULT_CONFIG_FILE))


def get_region() -> str:
    return os.environ.get("AWS_REGION", DEFAULT_REGION)


def get_log_level() -> int:
    """
    Log level from LARAFLEET_LOG_LEVEL, falling back to WARNING for
    unknown names.
    """
    name = os.environ.get("LARAFLEET_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def get_docker_path() -> Path:
    """Directory holding Dockerfile.web, Dockerfile.worker and conf/ for the image build."""
    return Path(os.environ.get("LARAFLEET_DOCKER_PATH", ".larafleet/docker"))
