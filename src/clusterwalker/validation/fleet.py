from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..logger import logger
from ..schemas.cloud import ObservedGroup, ObservedMember
from ..schemas.cluster import DesiredGroup
from ..schemas.kube import OrchestratorNode
from ..schemas.validation import FailureKind, ValidationNode, ValidationReport
from .interfaces import GroupFilter


@dataclass
class FleetState:
    """Per-run lookups handed from node classification to the pod scan."""

    node_groups: dict[str, DesiredGroup] = field(default_factory=dict)
    ready_nodes: list[OrchestratorNode] = field(default_factory=list)


def classify_node(
    node: OrchestratorNode, group: DesiredGroup, report: ValidationReport
) -> bool:
    """Adds the node to the report and returns whether it is ready."""
    role = group.node_role
    role_label = group.role_label
    ready = node.is_ready

    if not role.is_validated:
        logger.warning(f'ignoring node with role "{role_label}"')
        return ready

    report.add_node(
        ValidationNode(
            name=node.name,
            zone=node.zone,
            hostname=node.hostname,
            role=role_label,
            status=node.ready_status,
        )
    )
    if not ready:
        report.add_failure(
            FailureKind.NODE,
            node.name,
            f'node "{node.name}" of role "{role_label}" is not ready',
            instance_group=group,
        )
    return ready


def _expected_to_join(member: ObservedMember, group: DesiredGroup) -> bool:
    if not group.node_role.joins_cluster:
        return False
    if member.in_warm_pool:
        return False
    return not member.detached


def reconcile_fleet(
    cloud_groups: Mapping[str, ObservedGroup],
    groups: Sequence[DesiredGroup],
    group_filter: GroupFilter,
    report: ValidationReport,
) -> FleetState:
    """
    Compares each observed cloud group with its desired group and classifies
    every member. Desired groups never observed are reported as missing.
    """
    state = FleetState()
    groups_seen: set[str] = set()

    for cloud_name, cloud_group in cloud_groups.items():
        group = cloud_group.desired
        if group is None:
            logger.debug(f"Skipping cloud group {cloud_name}: no matching group")
            continue
        if not group_filter.should_validate(group):
            continue

        groups_seen.add(group.name)

        live = cloud_group.live_count
        if live < cloud_group.target_size:
            report.add_failure(
                FailureKind.INSTANCE_GROUP,
                group.name,
                f'InstanceGroup "{group.name}" did not have enough nodes '
                f"{live} vs {cloud_group.target_size}",
                instance_group=group,
            )

        for member in cloud_group.members:
            node = member.node
            if node is None:
                if _expected_to_join(member, group):
                    report.add_failure(
                        FailureKind.MACHINE,
                        member.id,
                        f'machine "{member.id}" has not yet joined cluster',
                        instance_group=group,
                    )
                continue

            state.node_groups[node.name] = group
            if classify_node(node, group, report):
                state.ready_nodes.append(node)

    for group in groups:
        if not group_filter.should_validate(group):
            continue
        if group.name not in groups_seen:
            report.add_failure(
                FailureKind.INSTANCE_GROUP,
                group.name,
                f'InstanceGroup "{group.name}" is missing from the cloud provider',
                instance_group=group,
            )

    return state
