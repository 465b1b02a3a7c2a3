from enum import Enum

from pydantic import BaseModel, Field

from .cluster import DesiredGroup
from .kube import OrchestratorNode


class MemberStatus(str, Enum):
    NORMAL = "normal"
    DETACHED = "detached"


class PoolState(str, Enum):
    NORMAL = "normal"
    WARM_POOL = "warm-pool"


class ObservedMember(BaseModel):
    id: str
    status: MemberStatus = MemberStatus.NORMAL
    state: PoolState = PoolState.NORMAL
    node: OrchestratorNode | None = Field(
        default=None, description="Node the instance registered as, if any"
    )

    @property
    def detached(self) -> bool:
        return self.status is MemberStatus.DETACHED

    @property
    def in_warm_pool(self) -> bool:
        return self.state is PoolState.WARM_POOL


class ObservedGroup(BaseModel):
    """The cloud provider's live view of an instance group."""

    name: str
    desired: DesiredGroup | None = Field(
        default=None, description="Matching desired group; None when unmatched"
    )
    target_size: int = 0
    ready: list[ObservedMember] = Field(default_factory=list)
    need_update: list[ObservedMember] = Field(
        default_factory=list, description="Members running an outdated template"
    )

    @property
    def members(self) -> list[ObservedMember]:
        return [*self.ready, *self.need_update]

    @property
    def live_count(self) -> int:
        return sum(1 for m in self.members if not m.detached)
