from .mapper import map_resource_env
from .resolve import resolve_environment, resolve_linked_environment, binding_env, app_url
from .overlay import prepare_environment_file, append_overlay, parse_overlay

__all__ = [
    "map_resource_env",
    "resolve_environment",
    "resolve_linked_environment",
    "binding_env",
    "app_url",
    "prepare_environment_file",
    "append_overlay",
    "parse_overlay",
]
