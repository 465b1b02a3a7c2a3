import threading
from collections.abc import Sequence
from typing import Any

from tenacity import retry

from ..clients import get_instance_group_managers_client
from ..core import RETRY_CONFIG
from ..errors import ValidationCancelledError
from ..logger import logger
from ..schemas.cloud import MemberStatus, ObservedGroup, ObservedMember, PoolState
from ..schemas.cluster import ClusterSpec, DesiredGroup
from ..schemas.kube import OrchestratorNode

# Instances a MIG keeps stopped or suspended in its standby pool
STANDBY_STATUSES = ("STOPPED", "SUSPENDED")

# Actions of instances that are leaving the group without being deleted
DETACHING_ACTIONS = ("ABANDONING",)


def _last_segment(url: str | None) -> str:
    """e.g. .../zones/us-central1-a -> us-central1-a"""
    return url.rsplit("/", 1)[-1] if url else ""


def safe_cluster_name(cluster_name: str) -> str:
    return cluster_name.replace(".", "-")


def instance_group_manager_name(cluster_name: str, group_name: str, zone: str) -> str:
    """
    Conventional MIG name for a group in one zone:
    us-central1-a, nodes, k8s.example.com -> a-nodes-k8s-example-com
    """
    short_zone = zone.rsplit("-", 1)[-1]
    return f"{short_zone}-{group_name}-{safe_cluster_name(cluster_name)}".lower()


def match_group(
    mig_name: str, zone: str, cluster: ClusterSpec, groups: Sequence[DesiredGroup]
) -> DesiredGroup | None:
    for group in groups:
        if group.zones and zone not in group.zones:
            continue
        if group.cloud_name and mig_name == group.cloud_name:
            return group
        if mig_name == group.name:
            return group
        if mig_name == instance_group_manager_name(cluster.name, group.name, zone):
            return group
    return None


def _node_index(nodes: Sequence[OrchestratorNode]) -> dict[str, OrchestratorNode]:
    """Maps GCE instance names to the nodes they registered as."""
    index: dict[str, OrchestratorNode] = {}
    for node in nodes:
        index.setdefault(node.name, node)
        # providerID: gce://<project>/<zone>/<instance>
        if node.provider_id and node.provider_id.startswith("gce://"):
            index[_last_segment(node.provider_id)] = node
    return index


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def _list_instance_group_managers(project_id: str) -> list[Any]:
    """Lists zonal managed instance groups across all zones of a project."""
    client = get_instance_group_managers_client()
    managers = []
    for scope, scoped in client.aggregated_list(project=project_id):
        if not scope.startswith("zones/"):
            continue
        managers.extend(scoped.instance_group_managers or [])
    return managers


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def _list_managed_instances(project_id: str, zone: str, mig_name: str) -> list[Any]:
    client = get_instance_group_managers_client()
    return list(
        client.list_managed_instances(
            project=project_id, zone=zone, instance_group_manager=mig_name
        )
    )


def member_from_managed_instance(
    instance: Any, nodes_by_instance: dict[str, OrchestratorNode]
) -> ObservedMember:
    name = _last_segment(instance.instance) or instance.name

    status = MemberStatus.NORMAL
    if instance.current_action in DETACHING_ACTIONS:
        status = MemberStatus.DETACHED

    state = PoolState.NORMAL
    if instance.instance_status in STANDBY_STATUSES:
        state = PoolState.WARM_POOL

    return ObservedMember(
        id=name,
        status=status,
        state=state,
        node=nodes_by_instance.get(name),
    )


class GCEInventory:
    """Cloud inventory backed by Compute Engine managed instance groups."""

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id

    def get_cloud_groups(
        self,
        cluster: ClusterSpec,
        groups: Sequence[DesiredGroup],
        warn_unmatched: bool,
        nodes: Sequence[OrchestratorNode],
        cancel: threading.Event | None = None,
    ) -> dict[str, ObservedGroup]:
        nodes_by_instance = _node_index(nodes)
        results: dict[str, ObservedGroup] = {}

        managers = sorted(
            _list_instance_group_managers(self.project_id), key=lambda m: m.name
        )
        for mig in managers:
            if cancel is not None and cancel.is_set():
                raise ValidationCancelledError("validation cancelled listing MIGs")

            zone = _last_segment(mig.zone)
            group = match_group(mig.name, zone, cluster, groups)
            if group is None:
                if warn_unmatched:
                    logger.warning(f"Found MIG with no corresponding group: {mig.name}")
                else:
                    logger.debug(f"Ignoring MIG {mig.name}: no corresponding group")
                continue

            current_template = _last_segment(mig.instance_template)
            ready = []
            need_update = []
            for instance in _list_managed_instances(self.project_id, zone, mig.name):
                member = member_from_managed_instance(instance, nodes_by_instance)
                template = _last_segment(
                    instance.version.instance_template if instance.version else None
                )
                if template and current_template and template != current_template:
                    need_update.append(member)
                else:
                    ready.append(member)

            results[mig.name] = ObservedGroup(
                name=mig.name,
                desired=group,
                target_size=mig.target_size,
                ready=ready,
                need_update=need_update,
            )

        return results
