from enum import Enum

from pydantic import BaseModel, Field

from ..core import LABEL_APP, LABEL_CONTROL_PLANE, LABEL_HOSTNAME, LABEL_ZONE


class NodeCondition(BaseModel):
    type: str
    status: str = Field(description="True, False or Unknown")
    reason: str | None = None
    message: str | None = None


class NodeAddress(BaseModel):
    type: str = "InternalIP"
    address: str


class OrchestratorNode(BaseModel):
    name: str
    labels: dict[str, str] = Field(default_factory=dict)
    addresses: list[NodeAddress] = Field(default_factory=list)
    conditions: list[NodeCondition] = Field(default_factory=list)
    provider_id: str | None = None

    @property
    def zone(self) -> str:
        return self.labels.get(LABEL_ZONE, "")

    @property
    def hostname(self) -> str:
        return self.labels.get(LABEL_HOSTNAME, "")

    @property
    def is_control_plane(self) -> bool:
        return LABEL_CONTROL_PLANE in self.labels

    @property
    def ready_status(self) -> str:
        """Raw status of the Ready condition, empty if the node has none."""
        for condition in self.conditions:
            if condition.type == "Ready":
                return condition.status
        return ""

    @property
    def is_ready(self) -> bool:
        return self.ready_status == "True"


class PodPhase(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class ContainerState(BaseModel):
    name: str
    ready: bool = False


class Workload(BaseModel):
    namespace: str
    name: str
    labels: dict[str, str] = Field(default_factory=dict)
    priority_class_name: str = ""
    phase: PodPhase | None = Field(default=None, description="None until reported")
    container_statuses: list[ContainerState] = Field(default_factory=list)
    host_ip: str = ""

    @property
    def app(self) -> str:
        return self.labels.get(LABEL_APP, "")

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def not_ready_containers(self) -> list[str]:
        return [c.name for c in self.container_statuses if not c.ready]
