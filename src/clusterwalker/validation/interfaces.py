"""
Narrow query interfaces the validator consumes. Concrete implementations live
in ``clusterwalker.walkers``; tests substitute in-memory fakes.
"""

import threading
from collections.abc import Iterator, Sequence
from typing import Protocol

from ..schemas.cloud import ObservedGroup
from ..schemas.cluster import ClusterSpec, DesiredGroup
from ..schemas.kube import OrchestratorNode, Workload


class CloudInventory(Protocol):
    def get_cloud_groups(
        self,
        cluster: ClusterSpec,
        groups: Sequence[DesiredGroup],
        warn_unmatched: bool,
        nodes: Sequence[OrchestratorNode],
        cancel: threading.Event | None = None,
    ) -> dict[str, ObservedGroup]: ...


class Orchestrator(Protocol):
    def list_nodes(
        self, cancel: threading.Event | None = None
    ) -> list[OrchestratorNode]: ...

    def iter_pods(self, cancel: threading.Event | None = None) -> Iterator[Workload]:
        """Yields every pod in the cluster; fetching pages as it goes."""
        ...


class Resolver(Protocol):
    def __call__(self, hostname: str) -> list[str]: ...


class GroupFilter(Protocol):
    def should_validate(self, group: DesiredGroup) -> bool: ...


class PodFilter(Protocol):
    def should_validate(self, pod: Workload) -> bool: ...
