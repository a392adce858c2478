"""
Environment resolution for a service.

Precedence, lowest first: resource defaults, that resource's overrides,
later bindings, explicit variables, APP_URL derived from the domain.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Union

from larafleet.resources.models import LinkBinding, LinkedResource, as_binding, resolve_value
from .mapper import map_resource_env


def _stringify(env: Mapping[str, object]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in env.items():
        v = resolve_value(v)
        out[str(k)] = "" if v is None else str(v)
    return out


def binding_env(binding: LinkBinding) -> Dict[str, str]:
    """Defaults for the binding's resource with its overrides applied in order."""
    env = map_resource_env(binding.resource)
    for override in binding.overrides:
        env.update(_stringify(override(binding.resource)))
    return env


def resolve_linked_environment(links: Iterable[Union[LinkBinding, LinkedResource]]) -> Dict[str, str]:
    """Merge every binding's variables in list order; later bindings win."""
    env: Dict[str, str] = {}
    for link in links:
        env.update(binding_env(as_binding(link)))
    return env


def app_url(domain: str) -> str:
    """https://<domain> for a bare host name, the domain verbatim if it has a scheme."""
    domain = str(domain)
    if "://" in domain:
        return domain
    return f"https://{domain}"


def resolve_environment(
    links: Iterable[Union[LinkBinding, LinkedResource]],
    explicit_vars: Optional[Mapping[str, object]] = None,
    domain: Optional[str] = None,
    auto_inject: bool = True,
) -> Dict[str, str]:
    """
    Resolve the final environment map for one service.

    Args:
        links: Linked resources or bindings, in declaration order
        explicit_vars: Operator-declared static variables
        domain: Web domain; when set APP_URL is derived from it last
        auto_inject: Whether linked resources contribute variables at all

    Returns:
        Dictionary of variable name to value
    """
    env: Dict[str, str] = {}

    if auto_inject:
        env.update(resolve_linked_environment(links))

    if explicit_vars:
        env.update(_stringify(explicit_vars))

    if domain:
        env["APP_URL"] = app_url(domain)

    return env
