"""
Declarative deployment input, loaded from YAML and validated with pydantic.
"""

from __future__ import annotations

import string
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from larafleet.errors import ConfigurationError
from larafleet.resources.models import (
    AuroraCluster,
    Bucket,
    EmailSender,
    LinkBinding,
    MysqlDatabase,
    PostgresDatabase,
    Queue,
    RdsInstance,
    RedisCache,
    UnknownResource,
)

RESOURCE_TYPES = {
    "postgres": PostgresDatabase,
    "mysql": MysqlDatabase,
    "aurora": AuroraCluster,
    "rds": RdsInstance,
    "redis": RedisCache,
    "bucket": Bucket,
    "queue": Queue,
    "email": EmailSender,
}

SUPPORTED_PHP_VERSIONS = {"7.4", "8.0", "8.1", "8.2", "8.3", "8.4", "8.5"}


class LinkDeclaration(BaseModel):
    """A linked resource; any key besides kind/environment is a resource attribute."""
    model_config = ConfigDict(extra="allow")

    kind: str
    environment: Optional[Dict[str, str]] = None

    def to_binding(self) -> LinkBinding:
        attrs = dict(self.model_extra or {})
        resource_cls = RESOURCE_TYPES.get(self.kind)

        if resource_cls is None:
            resource = UnknownResource(type_name=self.kind, properties=attrs)
            known = set(attrs)
        else:
            known = {f.name for f in fields(resource_cls)}
            unexpected = sorted(set(attrs) - known)
            if unexpected:
                raise ConfigurationError(f"Unknown attributes for {self.kind} link: {', '.join(unexpected)}")
            resource = resource_cls(**attrs)

        binding = LinkBinding(resource=resource)
        if self.environment:
            binding.with_override(template_override(self.environment, known, self.kind))
        return binding


def template_override(templates: Dict[str, str], known: set, kind: str):
    """
    Build an override function from KEY -> "{attribute}" templates.

    Placeholders are checked against the resource's attributes up front so
    unknown attributes are reported before resolution; format errors
    (e.g. a numeric spec applied to a string) surface as ConfigurationError.
    """
    for key, template in templates.items():
        for _, name, _, _ in string.Formatter().parse(template):
            if name is not None and name not in known:
                raise ConfigurationError(f"Environment template {key}={template!r} references unknown {kind} attribute {name!r}")

    def override(resource):
        attrs = {k: "" if v is None else v for k, v in resource.attributes().items()}
        rendered = {}
        for key, template in templates.items():
            try:
                rendered[key] = template.format(**attrs)
            except (ValueError, KeyError, IndexError) as e:
                raise ConfigurationError(f"Environment template {key}={template!r} cannot be rendered for {kind}: {e}") from e
        return rendered

    return override


class DomainConfig(BaseModel):
    name: str
    cert: Optional[str] = None
    dns: Optional[Any] = None


class ScalingConfig(BaseModel):
    min: int = 1
    max: int = 1
    cpu_utilization: Optional[int] = None
    memory_utilization: Optional[int] = None


class ServiceConfig(BaseModel):
    architecture: Optional[str] = None
    cpu: Optional[str] = None
    memory: Optional[str] = None
    storage: Optional[str] = None
    scaling: Optional[ScalingConfig] = None


class WebConfig(ServiceConfig):
    domain: Optional[Union[str, DomainConfig]] = None

    @property
    def domain_name(self) -> Optional[str]:
        if isinstance(self.domain, DomainConfig):
            return self.domain.name
        return self.domain


class TaskConfig(BaseModel):
    command: str
    dependencies: List[str] = Field(default_factory=list)


class WorkerConfig(ServiceConfig):
    name: Optional[str] = None
    horizon: bool = False
    scheduler: bool = False
    tasks: Dict[str, TaskConfig] = Field(default_factory=dict)


class EnvironmentConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file: Optional[str] = None
    auto_inject: bool = Field(True, alias="autoInject")
    vars: Dict[str, Any] = Field(default_factory=dict)


class DeploymentConfig(BaseModel):
    script: Optional[str] = None


class AppConfig(BaseModel):
    php: Optional[Union[str, float]] = None
    opcache: bool = True
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    deployment: DeploymentConfig = Field(default_factory=DeploymentConfig)


class AppDeclaration(BaseModel):
    """One deployable Laravel component."""
    name: str
    path: str = "."
    link: List[LinkDeclaration] = Field(default_factory=list)
    web: Optional[WebConfig] = None
    workers: List[WorkerConfig] = Field(default_factory=list)
    config: AppConfig = Field(default_factory=AppConfig)

    def bindings(self) -> List[LinkBinding]:
        return [link.to_binding() for link in self.link]


def parse_declarations(data: Any) -> List[AppDeclaration]:
    """
    Validate raw declaration data.

    Accepts a single app mapping or {"apps": [...]}.

    Raises:
        ConfigurationError: If the data does not validate
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Declaration must be a mapping")

    raw_apps = data["apps"] if "apps" in data else [data]
    if not isinstance(raw_apps, list):
        raise ConfigurationError("'apps' must be a list")

    try:
        return [AppDeclaration.model_validate(app) for app in raw_apps]
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ConfigurationError(f"Invalid declaration at {where or '<root>'}: {first.get('msg')}") from e


def load_declarations(path: Union[str, Path]) -> List[AppDeclaration]:
    """
    Load every app declared in a YAML file.

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"Could not find declaration file {p}")

    try:
        data = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse {p}: {e}") from e

    return parse_declarations(data)


def component_names(path: Union[str, Path]) -> List[str]:
    return [app.name for app in load_declarations(path)]
