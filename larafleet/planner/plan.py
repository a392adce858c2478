from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from larafleet.supervision.records import SupervisionRecord


class ServiceRole(Enum):
    WEB = "web"
    WORKER = "worker"


@dataclass
class ImageParameters:
    context: str
    dockerfile: str
    args: Dict[str, str] = field(default_factory=dict)


@dataclass
class ServicePlan:
    name: str
    role: ServiceRole
    environment: Dict[str, str]
    image: ImageParameters
    ports: List[Dict[str, str]] = field(default_factory=list)
    scaling: Optional[Dict[str, Any]] = None
    records: List[SupervisionRecord] = field(default_factory=list)
    build_path: Optional[Path] = None
    container_overrides: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role.value,
            "environment": dict(self.environment),
            "image": {"context": self.image.context, "dockerfile": self.image.dockerfile, "args": dict(self.image.args)},
            "ports": list(self.ports),
            "scaling": self.scaling,
            "tasks": [
                {"name": r.name, "type": r.type, "dependencies": r.dependencies.split("\n") if r.dependencies else []}
                for r in self.records
            ],
            "build_path": str(self.build_path) if self.build_path else None,
            "container_overrides": dict(self.container_overrides),
        }
