from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .cluster import DesiredGroup


class FailureKind(str, Enum):
    DNS = "dns"
    INSTANCE_GROUP = "InstanceGroup"
    MACHINE = "Machine"
    NODE = "Node"
    POD = "Pod"


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v not in (None, "", [], {})}


class ValidationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    name: str
    message: str
    instance_group: DesiredGroup | None = Field(
        default=None, description="Instance group the failure is attributed to"
    )

    def to_document(self) -> dict[str, Any]:
        group = None
        if self.instance_group is not None:
            group = _compact(self.instance_group.model_dump(mode="json"))
        return _compact(
            {
                "type": self.kind.value,
                "name": self.name,
                "message": self.message,
                "instanceGroup": group,
            }
        )


class ValidationNode(BaseModel):
    name: str
    zone: str = ""
    hostname: str = ""
    role: str = ""
    status: str = Field(default="", description="Raw Ready condition status")

    def to_document(self) -> dict[str, Any]:
        return _compact(self.model_dump(mode="json"))


class ValidationReport(BaseModel):
    """
    Outcome of one validation run. Failures and nodes are kept in the order
    they were recorded; nothing is ever removed or merged.
    """

    failures: list[ValidationFailure] = Field(default_factory=list)
    nodes: list[ValidationNode] = Field(default_factory=list)

    def add_failure(
        self,
        kind: FailureKind,
        name: str,
        message: str,
        instance_group: DesiredGroup | None = None,
    ) -> ValidationFailure:
        failure = ValidationFailure(
            kind=kind, name=name, message=message, instance_group=instance_group
        )
        self.failures.append(failure)
        return failure

    def add_node(self, node: ValidationNode) -> None:
        self.nodes.append(node)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if self.failures:
            doc["failures"] = [f.to_document() for f in self.failures]
        if self.nodes:
            doc["nodes"] = [n.to_document() for n in self.nodes]
        return doc
