"""
Default environment variables for each kind of linked resource.

Mapping never fails: kinds without a rule contribute nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from larafleet.resources.models import LinkedResource, ResourceKind, resolve_value

logger = logging.getLogger(__name__)

POSTGRES_DEFAULT_PORT = 5432
MYSQL_DEFAULT_PORT = 3306


def _text(value: Any) -> str:
    value = resolve_value(value)
    return "" if value is None else str(value)


def _port(value: Any) -> Any:
    value = resolve_value(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def postgres_env(database: LinkedResource) -> Dict[str, str]:
    return {
        "DB_CONNECTION": "pgsql",
        "DB_HOST": _text(database.host),
        "DB_DATABASE": _text(database.database),
        "DB_USERNAME": _text(database.username),
        "DB_PASSWORD": _text(database.password),
        "DB_PORT": _text(_port(database.port)),
    }


def mysql_env(database: LinkedResource) -> Dict[str, str]:
    # RDS instances expose endpoint/db_name instead of host/database
    if database.kind == ResourceKind.RDS_INSTANCE:
        host, name = database.endpoint, database.db_name
    else:
        host, name = database.host, database.database

    return {
        "DB_CONNECTION": "mysql",
        "DB_HOST": _text(host),
        "DB_DATABASE": _text(name),
        "DB_USERNAME": _text(database.username),
        "DB_PASSWORD": _text(database.password),
        "DB_PORT": _text(_port(database.port)),
    }


def relational_env(database: LinkedResource) -> Dict[str, str]:
    """Classify an untagged relational cluster by its port."""
    port = _port(database.port)
    if port == POSTGRES_DEFAULT_PORT:
        logger.warning(f"Relational resource has no engine tag; port {port} treated as postgres")
        return postgres_env(database)
    if port == MYSQL_DEFAULT_PORT:
        logger.warning(f"Relational resource has no engine tag; port {port} treated as mysql")
        return mysql_env(database)

    logger.warning(f"Relational resource on port {port} matches no known engine; no variables injected")
    return {}


def redis_env(cache: LinkedResource) -> Dict[str, str]:
    host = _text(cache.host)
    return {
        "REDIS_HOST": f"tls://{host}" if host else "",
        "REDIS_PORT": _text(_port(cache.port)),
        "REDIS_PASSWORD": _text(cache.password),
    }


def bucket_env(bucket: LinkedResource) -> Dict[str, str]:
    return {
        "FILESYSTEM_DISK": "s3",
        "AWS_BUCKET": _text(bucket.name),
    }


def queue_env(queue: LinkedResource) -> Dict[str, str]:
    return {
        "SQS_QUEUE": _text(queue.url),
    }


def email_env(mail: LinkedResource) -> Dict[str, str]:
    return {
        "MAIL_MAILER": "ses",
    }


MAPPERS: Dict[ResourceKind, Callable[[LinkedResource], Dict[str, str]]] = {
    ResourceKind.POSTGRES: postgres_env,
    ResourceKind.MYSQL: mysql_env,
    ResourceKind.RDS_INSTANCE: mysql_env,
    ResourceKind.RELATIONAL: relational_env,
    ResourceKind.REDIS: redis_env,
    ResourceKind.BUCKET: bucket_env,
    ResourceKind.QUEUE: queue_env,
    ResourceKind.EMAIL: email_env,
}


def map_resource_env(resource: LinkedResource) -> Dict[str, str]:
    """
    Map one linked resource to its default environment variables.

    Args:
        resource: Linked resource

    Returns:
        Dictionary of variable name to string value (empty for unknown kinds)
    """
    kind = getattr(resource, "kind", ResourceKind.UNKNOWN)
    mapper = MAPPERS.get(kind)
    if mapper is None:
        logger.debug(f"No environment mapping for resource kind {kind}")
        return {}
    return mapper(resource)
