import threading
from collections.abc import Iterable

from ..core import (
    CONTROL_PLANE_STATIC_PODS,
    CRITICAL_PRIORITY_CLASSES,
    NODE_CRITICAL,
    SYSTEM_NAMESPACE,
)
from ..errors import ValidationCancelledError
from ..schemas.cluster import DesiredGroup
from ..schemas.kube import PodPhase, Workload
from ..schemas.validation import FailureKind, ValidationReport
from .fleet import FleetState
from .interfaces import PodFilter


class StaticPodChecklist:
    """Static pods not yet seen on one control-plane node."""

    def __init__(self, node_name: str) -> None:
        self.node_name = node_name
        # dict keeps the declared order for reporting
        self.pending = dict.fromkeys(CONTROL_PLANE_STATIC_PODS)

    def tick(self, app: str) -> None:
        self.pending.pop(app, None)

    @property
    def missing(self) -> list[str]:
        return list(self.pending)


class WorkloadScan:
    """Single pass over the pod inventory of one validation run."""

    def __init__(
        self, fleet: FleetState, pod_filter: PodFilter, report: ValidationReport
    ) -> None:
        self.fleet = fleet
        self.pod_filter = pod_filter
        self.report = report
        self.node_by_address: dict[str, str] = {}
        self.checklists: dict[str, StaticPodChecklist] = {}

        for node in fleet.ready_nodes:
            if node.is_control_plane:
                self.checklists[node.name] = StaticPodChecklist(node.name)
            for address in node.addresses:
                self.node_by_address[address.address] = node.name

    def _node_of(self, pod: Workload) -> str | None:
        return self.node_by_address.get(pod.host_ip)

    def _track_static_pod(self, pod: Workload) -> None:
        if pod.namespace != SYSTEM_NAMESPACE:
            return
        checklist = self.checklists.get(self._node_of(pod) or "")
        if checklist is not None:
            checklist.tick(pod.app)

    def observe(self, pod: Workload) -> None:
        self._track_static_pod(pod)

        if not self.pod_filter.should_validate(pod):
            return

        priority = pod.priority_class_name
        if priority not in CRITICAL_PRIORITY_CLASSES:
            return
        if pod.phase is PodPhase.SUCCEEDED:
            return

        # cluster-critical pods are not tied to the group of the node they
        # happen to run on
        group: DesiredGroup | None = None
        if priority == NODE_CRITICAL:
            group = self.fleet.node_groups.get(self._node_of(pod) or "")

        if pod.phase is PodPhase.PENDING:
            message = f'{priority} pod "{pod.name}" is pending'
        elif pod.phase is PodPhase.UNKNOWN:
            message = f'{priority} pod "{pod.name}" is unknown phase'
        else:
            not_ready = pod.not_ready_containers
            if not not_ready:
                return
            containers = ",".join(not_ready)
            message = f'{priority} pod "{pod.name}" is not ready ({containers})'

        self.report.add_failure(
            FailureKind.POD, pod.qualified_name, message, instance_group=group
        )

    def finish(self) -> None:
        for node_name, checklist in self.checklists.items():
            for app in checklist.missing:
                self.report.add_failure(
                    FailureKind.NODE,
                    node_name,
                    f'control-plane node "{node_name}" is missing {app} pod',
                    instance_group=self.fleet.node_groups.get(node_name),
                )


def scan_workloads(
    pods: Iterable[Workload],
    fleet: FleetState,
    pod_filter: PodFilter,
    report: ValidationReport,
    cancel: threading.Event | None = None,
) -> None:
    """
    Classifies critical pods and checks control-plane static pods in one pass.
    Errors raised while iterating ``pods`` propagate; the report is then
    incomplete and must be discarded.
    """
    scan = WorkloadScan(fleet, pod_filter, report)
    for pod in pods:
        if cancel is not None and cancel.is_set():
            raise ValidationCancelledError("validation cancelled while listing pods")
        scan.observe(pod)
    if cancel is not None and cancel.is_set():
        raise ValidationCancelledError("validation cancelled while listing pods")
    scan.finish()
