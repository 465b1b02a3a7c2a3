from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NodeRole(str, Enum):
    CONTROL_PLANE = "control-plane"
    API_SERVER = "apiserver"
    NODE = "node"
    BASTION = "bastion"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, raw: str | None) -> "NodeRole":
        """
        Maps a free-form role string onto the closed set of roles.
        Empty means a plain worker node; unknown strings are UNRECOGNIZED.
        """
        value = (raw or "").strip().lower()
        if not value:
            return cls.NODE
        value = _ROLE_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return cls.UNRECOGNIZED

    @property
    def joins_cluster(self) -> bool:
        return self is not NodeRole.BASTION

    @property
    def is_validated(self) -> bool:
        """Roles whose nodes are listed in the report and checked for readiness."""
        return self in (NodeRole.CONTROL_PLANE, NodeRole.API_SERVER, NodeRole.NODE)


_ROLE_ALIASES = {
    "master": "control-plane",
    "controlplane": "control-plane",
    "api-server": "apiserver",
    "worker": "node",
}


class DnsMode(str, Enum):
    DNS = "dns"
    GOSSIP = "gossip"
    NONE = "none"


class ExternalDnsProvider(str, Enum):
    DNS_CONTROLLER = "dns-controller"
    EXTERNAL_DNS = "external-dns"


class DesiredGroup(BaseModel):
    """An instance group the operator expects the cloud provider to run."""

    model_config = ConfigDict(frozen=True)

    name: str
    role: str = Field(default="node", description="e.g., control-plane, node, bastion")
    min_size: int = Field(default=1, ge=0)
    max_size: int | None = Field(default=None, ge=0)
    zones: tuple[str, ...] = Field(
        default=(), description="Zones the group may run in; empty means any"
    )
    cloud_name: str | None = Field(
        default=None, description="Cloud-side group name, when it is not derived"
    )

    @property
    def node_role(self) -> NodeRole:
        return NodeRole.parse(self.role)

    @property
    def role_label(self) -> str:
        """Role as shown in the report; unrecognized roles keep their own name."""
        role = self.node_role
        if role is NodeRole.UNRECOGNIZED:
            return self.role.strip().lower()
        return role.value


class ClusterSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    api_host: str = Field(description="API server URL, e.g. https://api.example.com")
    dns_mode: DnsMode = DnsMode.DNS
    external_dns_provider: ExternalDnsProvider = ExternalDnsProvider.DNS_CONTROLLER
    project: str | None = Field(default=None, description="Cloud project id")

    @property
    def uses_dns_discovery(self) -> bool:
        return self.dns_mode is DnsMode.DNS
