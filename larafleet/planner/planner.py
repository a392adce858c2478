"""
Deployment planner: one ServicePlan per declared web/worker service.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Union

from larafleet import settings
from larafleet.envman import (
    append_overlay,
    prepare_environment_file,
    resolve_environment,
    resolve_linked_environment,
)
from larafleet.errors import ConfigurationError
from larafleet.supervision import build_supervision_records, s6_rc_dir, write_supervision_tree
from .build_files import ensure_dockerignore_allows_build, prepare_deployment_script, relative_to_app
from .declaration import SUPPORTED_PHP_VERSIONS, AppDeclaration, WorkerConfig
from .plan import ImageParameters, ServicePlan, ServiceRole

logger = logging.getLogger(__name__)

DEFAULT_PHP_VERSION = "8.4"
FORWARD_PORT = "8080/http"
HTTP_PORT = "80/http"
HTTPS_PORT = "443/https"


def php_version(app: AppDeclaration) -> str:
    if app.config.php is None:
        return DEFAULT_PHP_VERSION

    version = str(app.config.php)
    if version not in SUPPORTED_PHP_VERSIONS:
        raise ConfigurationError(f"Unsupported PHP version {version}. Available: {', '.join(sorted(SUPPORTED_PHP_VERSIONS))}")
    return version


def default_public_ports(domain: Optional[str]) -> List[Dict[str, str]]:
    ports = [{"listen": HTTP_PORT, "forward": FORWARD_PORT}]
    if domain:
        ports.append({"listen": HTTPS_PORT, "forward": FORWARD_PORT})
    return ports


def worker_name(worker: WorkerConfig, index: int) -> str:
    return worker.name or f"worker-{index + 1}"


def worker_names(workers: List[WorkerConfig]) -> List[str]:
    """
    Resolved worker names in declaration order.

    Raises:
        ConfigurationError: If two workers resolve to the same name
    """
    names: List[str] = []
    for index, worker in enumerate(workers):
        name = worker_name(worker, index)
        if name in names:
            raise ConfigurationError(f"Duplicate worker name {name!r}; give each worker a unique name")
        names.append(name)
    return names


def image_parameters(app: AppDeclaration, role: ServiceRole, app_path: Path, docker_path: Path, extra_args: Optional[Dict[str, str]] = None) -> ImageParameters:
    args = {
        "PHP_VERSION": php_version(app),
        "PHP_OPCACHE_ENABLE": "1" if app.config.opcache else "0",
        "AUTORUN_LARAVEL_MIGRATION": "true" if role == ServiceRole.WEB else "false",
        "CONTAINER_TYPE": role.value,
        "ENV_FILENAME": app.config.environment.file or ".env",
        "stage": "deploy",
        "platform": "linux/amd64",
    }
    args.update(extra_args or {})

    return ImageParameters(
        context=str(app_path),
        dockerfile=relative_to_app(docker_path / f"Dockerfile.{role.value}", app_path),
        args=args,
    )


class DeploymentPlanner:
    """
    Builds service plans for one app declaration.

    Build files (env overlay, deploy script, s6 trees) are written under
    build_path as a side effect; plan generation is single-shot.
    """

    def __init__(
        self,
        app: AppDeclaration,
        app_path: Union[str, Path, None] = None,
        build_path: Union[str, Path, None] = None,
        docker_path: Union[str, Path, None] = None,
    ):
        self.app = app
        self.app_path = Path(app_path if app_path is not None else app.path)
        self.build_path = Path(build_path) if build_path is not None else self.app_path / settings.get_build_path()
        self.docker_path = Path(docker_path) if docker_path is not None else self.app_path / settings.get_docker_path()
        self.bindings = app.bindings()

    @property
    def deploy_dir(self) -> Path:
        return self.build_path / "deploy"

    @property
    def domain(self) -> Optional[str]:
        return self.app.web.domain_name if self.app.web else None

    def environment(self) -> Dict[str, str]:
        env_config = self.app.config.environment
        return resolve_environment(
            self.bindings,
            explicit_vars=env_config.vars,
            domain=self.domain,
            auto_inject=env_config.auto_inject,
        )

    def prepare_build_files(self) -> None:
        self.build_path.mkdir(parents=True, exist_ok=True)
        env_config = self.app.config.environment

        overlay = prepare_environment_file(self.app_path, env_config.file, self.deploy_dir)
        if overlay is not None and env_config.auto_inject:
            count = append_overlay(overlay, resolve_linked_environment(self.bindings))
            logger.info(f"Appended {count} linked variables to {overlay}")

        prepare_deployment_script(self.app_path, self.app.config.deployment.script, self.deploy_dir)

    def allow_build_in_context(self, image: ImageParameters) -> None:
        ensure_dockerignore_allows_build(self.app_path, self.build_path, Path(image.dockerfile).name)

    def web_plan(self) -> ServicePlan:
        web = self.app.web
        image = image_parameters(self.app, ServiceRole.WEB, self.app_path, self.docker_path)
        self.allow_build_in_context(image)
        return ServicePlan(
            name=f"{self.app.name}-Web",
            role=ServiceRole.WEB,
            environment=self.environment(),
            image=image,
            ports=default_public_ports(self.domain),
            scaling=web.scaling.model_dump() if web.scaling else None,
        )

    def worker_plan(self, worker: WorkerConfig, name: str) -> ServicePlan:
        worker_build_path = self.build_path / f"worker-{name}"

        tasks = {task_name: task.model_dump() for task_name, task in worker.tasks.items()}
        records = build_supervision_records(tasks, horizon=worker.horizon, scheduler=worker.scheduler)
        # the tree is rebuilt from scratch so removed tasks do not autostart
        shutil.rmtree(s6_rc_dir(worker_build_path), ignore_errors=True)
        write_supervision_tree(records, worker_build_path)
        logger.info(f"Worker {name}: {len(records)} supervised tasks")

        extra_args = {
            "CONF_PATH": relative_to_app(self.docker_path / "conf", self.app_path),
            "CUSTOM_CONF_PATH": relative_to_app(worker_build_path, self.app_path),
        }
        image = image_parameters(self.app, ServiceRole.WORKER, self.app_path, self.docker_path, extra_args)
        self.allow_build_in_context(image)

        return ServicePlan(
            name=f"{self.app.name}-{name}",
            role=ServiceRole.WORKER,
            environment=self.environment(),
            image=image,
            scaling=worker.scaling.model_dump() if worker.scaling else None,
            records=records,
            build_path=worker_build_path,
            # s6-overlay must be PID 1
            container_overrides={"linuxParameters": {"initProcessEnabled": False}},
        )

    def plan(self) -> List[ServicePlan]:
        php_version(self.app)
        names = worker_names(self.app.workers)
        self.prepare_build_files()

        plans: List[ServicePlan] = []
        if self.app.web:
            plans.append(self.web_plan())
        for worker, name in zip(self.app.workers, names):
            plans.append(self.worker_plan(worker, name))

        logger.info(f"Planned {len(plans)} services for {self.app.name}")
        return plans


def plan_deployment(
    app: AppDeclaration,
    app_path: Union[str, Path, None] = None,
    build_path: Union[str, Path, None] = None,
    docker_path: Union[str, Path, None] = None,
) -> List[ServicePlan]:
    """
    Plan every service of an app.

    Args:
        app: Validated app declaration
        app_path: Application root (defaults to the declaration's path)
        build_path: Where build files are written (defaults to LARAFLEET_BUILD_PATH under app_path)
        docker_path: Dockerfile/conf directory (defaults to LARAFLEET_DOCKER_PATH under app_path)

    Returns:
        List of service plans, web first then workers in declaration order

    Raises:
        ConfigurationError: If the declaration is invalid
    """
    return DeploymentPlanner(app, app_path, build_path, docker_path).plan()


def plan_apps(
    apps: List[AppDeclaration],
    app_path: Union[str, Path, None] = None,
    build_path: Union[str, Path, None] = None,
    docker_path: Union[str, Path, None] = None,
) -> Dict[str, List[ServicePlan]]:
    """
    Plan every app of a declaration file.

    A single app writes straight into build_path. With several apps each one
    gets its own <build_path>/<app name> directory so overlays and s6 trees
    are not shared.

    Raises:
        ConfigurationError: If two apps share a name or a declaration is invalid
    """
    names = [app.name for app in apps]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate app names: {', '.join(duplicates)}")

    base = Path(app_path) if app_path is not None else None
    results: Dict[str, List[ServicePlan]] = {}
    for app in apps:
        app_build_path = build_path
        if len(apps) > 1:
            if app_build_path is not None:
                root = Path(app_build_path)
            else:
                root = (base if base is not None else Path(app.path)) / settings.get_build_path()
            app_build_path = root / app.name
        results[app.name] = plan_deployment(app, app_path=base, build_path=app_build_path, docker_path=docker_path)
    return results
