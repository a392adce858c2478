"""
Cluster resolution from a stage name and a declared component.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from larafleet import settings
from larafleet.errors import AmbiguousMatchError, ConfigurationError, NotFoundError
from larafleet.planner.declaration import component_names

logger = logging.getLogger(__name__)


def cluster_pattern(stage: str, component: str) -> str:
    """Cluster name suffix the host derives for a component in a stage."""
    return f"{stage}-{component.replace('-', '')}Cluster"


def cluster_name(arn: str) -> str:
    return arn.split("/")[-1]


def list_cluster_arns(ecs) -> List[str]:
    arns: List[str] = []
    paginator = ecs.get_paginator("list_clusters")
    for page in paginator.paginate():
        arns.extend(page.get("clusterArns", []))
    return arns


def locate_cluster(ecs, stage: str, component: str) -> str:
    """
    Find the cluster ARN for a component in a stage.

    A cluster whose name contains the full pattern is preferred; otherwise
    the first name containing both the stage and the component is used.

    Raises:
        NotFoundError: If no cluster matches
    """
    stripped = component.replace("-", "")
    pattern = cluster_pattern(stage, component)
    logger.info(f"Looking for cluster matching pattern: *{pattern}")

    arns = list_cluster_arns(ecs)
    if not arns:
        raise NotFoundError("No ECS clusters found in this region.")

    exact = [arn for arn in arns if pattern in cluster_name(arn)]
    loose = [arn for arn in arns if stage in cluster_name(arn) and stripped in cluster_name(arn)]
    candidates = exact or loose

    if not candidates:
        available = ", ".join(cluster_name(arn) for arn in arns)
        raise NotFoundError(f'No cluster found matching stage "{stage}" and component "{component}". Available clusters: {available}')

    logger.info(f"Auto-detected cluster: {cluster_name(candidates[0])}")
    return candidates[0]


def find_cluster_arn(
    ecs,
    stage: Optional[str],
    cluster: Optional[str] = None,
    declaration_path: Union[str, Path, None] = None,
) -> str:
    """
    Resolve the cluster to operate on.

    An explicit cluster always wins. Otherwise the single component declared
    in the declaration file is located.

    Raises:
        ConfigurationError: Missing stage, missing file or no component
        AmbiguousMatchError: More than one component declared
        NotFoundError: No cluster matches
    """
    if not stage:
        raise ConfigurationError("Stage is required. Use --stage to specify the deployment stage.")

    if cluster:
        return cluster

    path = Path(declaration_path) if declaration_path else settings.get_config_path()
    if not path.exists():
        raise ConfigurationError(f"Could not find {path}. Use --cluster to specify the cluster ARN manually.")

    components = component_names(path)
    if not components:
        raise ConfigurationError(f"No components declared in {path}. Use --cluster to specify the cluster ARN manually.")
    if len(components) > 1:
        raise AmbiguousMatchError(f"Multiple components declared: {', '.join(components)}. Use --cluster to choose one.")

    return locate_cluster(ecs, stage, components[0])
