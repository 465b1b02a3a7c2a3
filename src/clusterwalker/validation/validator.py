import threading
from collections.abc import Sequence

from ..errors import (
    CloudInventoryError,
    NodeListError,
    NoInstanceGroupsError,
    PodListError,
    ValidationCancelledError,
)
from ..logger import logger
from ..schemas.cluster import ClusterSpec, DesiredGroup
from ..schemas.validation import ValidationReport
from .dns import check_api_endpoint
from .filters import AllGroups, AllPods
from .fleet import reconcile_fleet
from .interfaces import CloudInventory, GroupFilter, Orchestrator, PodFilter, Resolver
from .workloads import scan_workloads


class ClusterValidator:
    """
    Reconciles the desired instance groups of a cluster with what the cloud
    provider and the API server report, and returns a ValidationReport.

    A returned report with no failures means the cluster is healthy; a raised
    ClusterValidationError means validation could not be performed at all.
    """

    def __init__(
        self,
        cluster: ClusterSpec,
        groups: Sequence[DesiredGroup],
        cloud: CloudInventory,
        orchestrator: Orchestrator,
        resolver: Resolver,
        group_filter: GroupFilter | None = None,
        pod_filter: PodFilter | None = None,
    ) -> None:
        if not groups:
            raise NoInstanceGroupsError("no InstanceGroup objects found")

        self.cluster = cluster
        self.groups = list(groups)
        self.cloud = cloud
        self.orchestrator = orchestrator
        self.resolver = resolver
        self.group_filter = group_filter or AllGroups()
        self.pod_filter = pod_filter or AllPods()

    @staticmethod
    def _check_cancelled(cancel: threading.Event | None, step: str) -> None:
        if cancel is not None and cancel.is_set():
            raise ValidationCancelledError(f"validation cancelled before {step}")

    def validate(self, cancel: threading.Event | None = None) -> ValidationReport:
        report = ValidationReport()

        # Gossip and DNS-less clusters have no API record to check
        if self.cluster.uses_dns_discovery:
            self._check_cancelled(cancel, "resolving the API endpoint")
            placeholder = check_api_endpoint(self.cluster, self.resolver, report)
            self._check_cancelled(cancel, "using the API endpoint result")
            if placeholder:
                logger.info(f"API DNS for {self.cluster.name} is still a placeholder")
                return report

        self._check_cancelled(cancel, "listing nodes")
        try:
            nodes = self.orchestrator.list_nodes(cancel=cancel)
        except ValidationCancelledError:
            raise
        except Exception as e:
            raise NodeListError(f"error listing nodes: {e}") from e

        self._check_cancelled(cancel, "querying the cloud inventory")
        try:
            cloud_groups = self.cloud.get_cloud_groups(
                self.cluster, self.groups, False, nodes, cancel=cancel
            )
        except ValidationCancelledError:
            raise
        except Exception as e:
            raise CloudInventoryError(
                f"error listing cloud groups for {self.cluster.name!r}: {e}"
            ) from e

        fleet = reconcile_fleet(cloud_groups, self.groups, self.group_filter, report)
        logger.info(
            f"Classified {len(report.nodes)} nodes, {len(fleet.ready_nodes)} ready"
        )

        self._check_cancelled(cancel, "listing pods")
        try:
            scan_workloads(
                self.orchestrator.iter_pods(cancel=cancel),
                fleet,
                self.pod_filter,
                report,
                cancel=cancel,
            )
        except ValidationCancelledError:
            raise
        except Exception as e:
            raise PodListError(
                f"cannot get pod health for {self.cluster.name!r}: {e}"
            ) from e

        self._check_cancelled(cancel, "returning the report")
        return report
