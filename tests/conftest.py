import pytest

from clusterwalker.core import LABEL_CONTROL_PLANE, LABEL_HOSTNAME, LABEL_ZONE
from clusterwalker.schemas.cloud import (
    MemberStatus,
    ObservedGroup,
    ObservedMember,
    PoolState,
)
from clusterwalker.schemas.cluster import ClusterSpec, DesiredGroup
from clusterwalker.schemas.kube import (
    ContainerState,
    NodeAddress,
    NodeCondition,
    OrchestratorNode,
    PodPhase,
    Workload,
)


@pytest.fixture
def cluster():
    return ClusterSpec(
        name="k8s.example.com",
        api_host="https://api.k8s.example.com",
        project="test-project",
    )


@pytest.fixture
def make_node():
    def _make(name, ready=True, control_plane=False, ip=None, zone="us-west1-a"):
        labels = {LABEL_ZONE: zone, LABEL_HOSTNAME: name}
        if control_plane:
            labels[LABEL_CONTROL_PLANE] = ""
        status = "True" if ready else "False"
        return OrchestratorNode(
            name=name,
            labels=labels,
            addresses=[NodeAddress(address=ip)] if ip else [],
            conditions=[NodeCondition(type="Ready", status=status)],
        )

    return _make


@pytest.fixture
def make_member():
    def _make(id, node=None, detached=False, warm_pool=False):
        return ObservedMember(
            id=id,
            node=node,
            status=MemberStatus.DETACHED if detached else MemberStatus.NORMAL,
            state=PoolState.WARM_POOL if warm_pool else PoolState.NORMAL,
        )

    return _make


@pytest.fixture
def make_cloud_group():
    def _make(group: DesiredGroup, members, target_size=None, need_update=()):
        return ObservedGroup(
            name=group.name,
            desired=group,
            target_size=len(members) if target_size is None else target_size,
            ready=list(members),
            need_update=list(need_update),
        )

    return _make


@pytest.fixture
def make_pod():
    def _make(
        name,
        namespace="kube-system",
        priority="system-node-critical",
        phase=PodPhase.RUNNING,
        host_ip="",
        app=None,
        containers=None,
    ):
        return Workload(
            namespace=namespace,
            name=name,
            labels={"k8s-app": app} if app else {},
            priority_class_name=priority,
            phase=phase,
            host_ip=host_ip,
            container_statuses=[
                ContainerState(name=c, ready=r) for c, r in (containers or {}).items()
            ],
        )

    return _make
