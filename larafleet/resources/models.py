"""
Linked resource models.

Resources are owned by the orchestration host; attribute values may be
plain values or zero-argument callables that resolve once provisioning
completes. Nothing here mutates a resource.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Union


class ResourceKind(Enum):
    """Discriminator for linked resource variants."""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    RELATIONAL = "relational"  # no family tag, classified by port
    RDS_INSTANCE = "rds_instance"
    REDIS = "redis"
    BUCKET = "bucket"
    QUEUE = "queue"
    EMAIL = "email"
    UNKNOWN = "unknown"


Deferred = Union[Any, Callable[[], Any]]


def resolve_value(value: Deferred) -> Any:
    """Return the value, calling it first if it is deferred."""
    if callable(value):
        return value()
    return value


@dataclass(frozen=True)
class _Resource:
    kind: ClassVar[ResourceKind] = ResourceKind.UNKNOWN

    def attributes(self) -> Dict[str, Any]:
        """Resolved attribute values keyed by attribute name."""
        return {f.name: resolve_value(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class PostgresDatabase(_Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.POSTGRES
    host: Deferred = None
    port: Deferred = 5432
    username: Deferred = None
    password: Deferred = None
    database: Deferred = None


@dataclass(frozen=True)
class MysqlDatabase(_Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.MYSQL
    host: Deferred = None
    port: Deferred = 3306
    username: Deferred = None
    password: Deferred = None
    database: Deferred = None


@dataclass(frozen=True)
class AuroraCluster(_Resource):
    """Relational cluster whose engine family is only known from its port."""
    kind: ClassVar[ResourceKind] = ResourceKind.RELATIONAL
    host: Deferred = None
    port: Deferred = None
    username: Deferred = None
    password: Deferred = None
    database: Deferred = None


@dataclass(frozen=True)
class RdsInstance(_Resource):
    """Plain RDS instance (mysql family); exposes endpoint/db_name."""
    kind: ClassVar[ResourceKind] = ResourceKind.RDS_INSTANCE
    endpoint: Deferred = None
    port: Deferred = 3306
    username: Deferred = None
    password: Deferred = None
    db_name: Deferred = None


@dataclass(frozen=True)
class RedisCache(_Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.REDIS
    host: Deferred = None
    port: Deferred = 6379
    password: Deferred = None


@dataclass(frozen=True)
class Bucket(_Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.BUCKET
    name: Deferred = None


@dataclass(frozen=True)
class Queue(_Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.QUEUE
    url: Deferred = None


@dataclass(frozen=True)
class EmailSender(_Resource):
    kind: ClassVar[ResourceKind] = ResourceKind.EMAIL
    sender: Deferred = None


@dataclass(frozen=True)
class UnknownResource(_Resource):
    """Any resource type this version does not know how to map."""
    kind: ClassVar[ResourceKind] = ResourceKind.UNKNOWN
    type_name: str = "unknown"
    properties: Dict[str, Any] = field(default_factory=dict)

    def attributes(self) -> Dict[str, Any]:
        return {k: resolve_value(v) for k, v in self.properties.items()}


LinkedResource = Union[
    PostgresDatabase,
    MysqlDatabase,
    AuroraCluster,
    RdsInstance,
    RedisCache,
    Bucket,
    Queue,
    EmailSender,
    UnknownResource,
]

EnvironmentOverrideFn = Callable[[LinkedResource], Mapping[str, Any]]


@dataclass
class LinkBinding:
    """
    A linked resource plus the operator's environment overrides for it.

    Overrides are applied after the resource's default variables, in the
    order they were registered.
    """
    resource: LinkedResource
    overrides: List[EnvironmentOverrideFn] = field(default_factory=list)

    def with_override(self, fn: EnvironmentOverrideFn) -> "LinkBinding":
        self.overrides.append(fn)
        return self


def as_binding(link: Union[LinkedResource, LinkBinding], environment: Optional[EnvironmentOverrideFn] = None) -> LinkBinding:
    """Wrap a bare resource in a binding; bindings pass through unchanged."""
    binding = link if isinstance(link, LinkBinding) else LinkBinding(resource=link)
    if environment is not None:
        binding.with_override(environment)
    return binding
