from collections.abc import Iterable

from ..schemas.cluster import DesiredGroup, NodeRole
from ..schemas.kube import Workload


class AllGroups:
    def should_validate(self, group: DesiredGroup) -> bool:
        return True


class GroupsByName:
    """Validates only the named instance groups."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = frozenset(names)

    def should_validate(self, group: DesiredGroup) -> bool:
        return group.name in self.names


class GroupsByRole:
    def __init__(self, roles: Iterable[NodeRole | str]) -> None:
        self.roles = frozenset(
            r if isinstance(r, NodeRole) else NodeRole.parse(r) for r in roles
        )

    def should_validate(self, group: DesiredGroup) -> bool:
        return group.node_role in self.roles


class AllPods:
    def should_validate(self, pod: Workload) -> bool:
        return True


class PodsInNamespaces:
    def __init__(self, namespaces: Iterable[str]) -> None:
        self.namespaces = frozenset(namespaces)

    def should_validate(self, pod: Workload) -> bool:
        return pod.namespace in self.namespaces


class PodsExcludingNamespaces:
    def __init__(self, namespaces: Iterable[str]) -> None:
        self.namespaces = frozenset(namespaces)

    def should_validate(self, pod: Workload) -> bool:
        return pod.namespace not in self.namespaces
