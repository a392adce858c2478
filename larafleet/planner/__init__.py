from .declaration import AppDeclaration, load_declarations, parse_declarations, component_names
from .plan import ServicePlan, ServiceRole, ImageParameters
from .planner import DeploymentPlanner, plan_deployment, plan_apps, default_public_ports

__all__ = [
    "AppDeclaration",
    "load_declarations",
    "parse_declarations",
    "component_names",
    "ServicePlan",
    "ServiceRole",
    "ImageParameters",
    "DeploymentPlanner",
    "plan_deployment",
    "plan_apps",
    "default_public_ports",
]
