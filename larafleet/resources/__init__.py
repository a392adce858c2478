from .models import (
    ResourceKind,
    LinkedResource,
    PostgresDatabase,
    MysqlDatabase,
    AuroraCluster,
    RdsInstance,
    RedisCache,
    Bucket,
    Queue,
    EmailSender,
    UnknownResource,
    LinkBinding,
    EnvironmentOverrideFn,
    resolve_value,
    as_binding,
)

__all__ = [
    "ResourceKind",
    "LinkedResource",
    "PostgresDatabase",
    "MysqlDatabase",
    "AuroraCluster",
    "RdsInstance",
    "RedisCache",
    "Bucket",
    "Queue",
    "EmailSender",
    "UnknownResource",
    "LinkBinding",
    "EnvironmentOverrideFn",
    "resolve_value",
    "as_binding",
]
