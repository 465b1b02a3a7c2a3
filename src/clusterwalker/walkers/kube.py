import threading
from collections.abc import Iterator
from typing import Any

from tenacity import retry

from ..core import POD_PAGE_SIZE, RETRY_CONFIG
from ..errors import ValidationCancelledError
from ..logger import logger
from ..schemas.kube import (
    ContainerState,
    NodeAddress,
    NodeCondition,
    OrchestratorNode,
    PodPhase,
    Workload,
)


def node_from_k8s(node: Any) -> OrchestratorNode:
    """Converts a kubernetes V1Node into an OrchestratorNode."""
    status = node.status
    addresses = []
    conditions = []
    if status is not None:
        for addr in status.addresses or []:
            addresses.append(NodeAddress(type=addr.type, address=addr.address))
        for cond in status.conditions or []:
            conditions.append(
                NodeCondition(
                    type=cond.type,
                    status=cond.status,
                    reason=cond.reason,
                    message=cond.message,
                )
            )

    return OrchestratorNode(
        name=node.metadata.name,
        labels=dict(node.metadata.labels) if node.metadata.labels else {},
        addresses=addresses,
        conditions=conditions,
        provider_id=node.spec.provider_id if node.spec is not None else None,
    )


def pod_from_k8s(pod: Any) -> Workload:
    """Converts a kubernetes V1Pod into a Workload."""
    status = pod.status
    containers = []
    phase: PodPhase | None = None
    host_ip = ""
    if status is not None:
        for cs in status.container_statuses or []:
            containers.append(ContainerState(name=cs.name, ready=bool(cs.ready)))
        if status.phase:
            phase = PodPhase(status.phase)
        host_ip = status.host_ip or ""

    priority = ""
    if pod.spec is not None and pod.spec.priority_class_name:
        priority = pod.spec.priority_class_name

    return Workload(
        namespace=pod.metadata.namespace,
        name=pod.metadata.name,
        labels=dict(pod.metadata.labels) if pod.metadata.labels else {},
        priority_class_name=priority,
        phase=phase,
        container_statuses=containers,
        host_ip=host_ip,
    )


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def _list_nodes(core_v1: Any) -> Any:
    return core_v1.list_node()


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def _list_pod_page(core_v1: Any, limit: int, continue_token: str | None) -> Any:
    return core_v1.list_pod_for_all_namespaces(limit=limit, _continue=continue_token)


class KubeOrchestrator:
    """Read-only view of the API server backed by a CoreV1Api."""

    def __init__(self, core_v1: Any, page_size: int = POD_PAGE_SIZE) -> None:
        self.core_v1 = core_v1
        self.page_size = page_size

    def list_nodes(
        self, cancel: threading.Event | None = None
    ) -> list[OrchestratorNode]:
        response = _list_nodes(self.core_v1)
        nodes = [node_from_k8s(n) for n in response.items]
        logger.debug(f"Listed {len(nodes)} nodes")
        return nodes

    def iter_pods(self, cancel: threading.Event | None = None) -> Iterator[Workload]:
        continue_token = None
        page = 0
        while True:
            if cancel is not None and cancel.is_set():
                raise ValidationCancelledError("validation cancelled while paging pods")

            response = _list_pod_page(self.core_v1, self.page_size, continue_token)
            page += 1
            logger.debug(f"Fetched pod page {page} ({len(response.items)} pods)")
            for item in response.items:
                yield pod_from_k8s(item)

            continue_token = response.metadata._continue if response.metadata else None
            if not continue_token:
                return
