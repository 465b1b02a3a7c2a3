import argparse
import json
import sys
from importlib.metadata import version

from rich.console import Console
from rich.table import Table

from .clients import get_core_v1_api
from .config import load_cluster_config
from .errors import ClusterValidationError, ConfigError
from .logger import logger, set_verbosity
from .schemas.validation import ValidationReport
from .validation.filters import (
    AllGroups,
    AllPods,
    GroupsByName,
    GroupsByRole,
    PodsExcludingNamespaces,
    PodsInNamespaces,
)
from .validation.interfaces import GroupFilter, PodFilter
from .validation.validator import ClusterValidator
from .walkers.dns import resolve_host
from .walkers.gce import GCEInventory
from .walkers.kube import KubeOrchestrator

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FAILURES = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="clusterwalker: Kubernetes Cluster Fleet Validator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate every instance group of a cluster
  clusterwalker --config cluster.yaml

  # Only the control plane, as JSON
  clusterwalker --config cluster.yaml --roles control-plane --json

  # Use a specific kubeconfig context and ignore pods in a namespace
  clusterwalker --config cluster.yaml --context prod --exclude-namespaces sandbox
""",
    )
    try:
        ver = version("clusterwalker")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"clusterwalker v{ver}")

    parser.add_argument(
        "--config", required=True, help="Cluster descriptor (YAML or JSON)"
    )
    parser.add_argument(
        "--project-id", help="GCP Project ID (default: cluster.project from config)"
    )
    parser.add_argument("--kubeconfig", help="Path to kubeconfig file")
    parser.add_argument("--context", help="Kubeconfig context to use")

    group_scope = parser.add_mutually_exclusive_group()
    group_scope.add_argument(
        "--instance-groups", nargs="+", help="Only validate these instance groups"
    )
    group_scope.add_argument(
        "--roles", nargs="+", help="Only validate instance groups with these roles"
    )

    pod_scope = parser.add_mutually_exclusive_group()
    pod_scope.add_argument(
        "--namespaces", nargs="+", help="Only validate pods in these namespaces"
    )
    pod_scope.add_argument(
        "--exclude-namespaces", nargs="+", help="Skip pods in these namespaces"
    )

    parser.add_argument("--json", action="store_true", help="Output results as JSON")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )
    return parser


def build_group_filter(args: argparse.Namespace) -> GroupFilter:
    if args.instance_groups:
        return GroupsByName(args.instance_groups)
    if args.roles:
        return GroupsByRole(args.roles)
    return AllGroups()


def build_pod_filter(args: argparse.Namespace) -> PodFilter:
    if args.namespaces:
        return PodsInNamespaces(args.namespaces)
    if args.exclude_namespaces:
        return PodsExcludingNamespaces(args.exclude_namespaces)
    return AllPods()


def render_report(report: ValidationReport, console: Console) -> None:
    nodes = Table(title="Nodes")
    nodes.add_column("Name", style="cyan")
    nodes.add_column("Role")
    nodes.add_column("Zone")
    nodes.add_column("Ready")
    for n in report.nodes:
        style = "green" if n.status == "True" else "red"
        nodes.add_row(n.name, n.role, n.zone, f"[{style}]{n.status or '-'}[/{style}]")
    if report.nodes:
        console.print(nodes)

    if not report.failures:
        console.print("[green]Your cluster is ready.[/green]")
        return

    failures = Table(title=f"Validation Failures ({len(report.failures)})")
    failures.add_column("Kind", style="cyan")
    failures.add_column("Name", style="red")
    failures.add_column("Message")
    for f in report.failures:
        failures.add_row(f.kind.value, f.name, f.message)
    console.print(failures)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    set_verbosity(args.verbose)

    log_console = Console(stderr=True, quiet=args.json)
    out_console = Console(quiet=args.json)

    try:
        config = load_cluster_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(EXIT_ERROR)

    project_id = args.project_id or config.cluster.project
    if not project_id:
        parser.error("--project-id is required when the config has no cluster.project")

    log_console.print(
        f"Validating cluster [bold cyan]{config.cluster.name}[/bold cyan] "
        f"({len(config.instance_groups)} instance groups)"
    )

    try:
        core_v1 = get_core_v1_api(args.kubeconfig, args.context)
        validator = ClusterValidator(
            config.cluster,
            config.instance_groups,
            cloud=GCEInventory(project_id),
            orchestrator=KubeOrchestrator(core_v1),
            resolver=resolve_host,
            group_filter=build_group_filter(args),
            pod_filter=build_pod_filter(args),
        )
        report = validator.validate()
    except KeyboardInterrupt:
        log_console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        sys.exit(EXIT_INTERRUPTED)
    except ClusterValidationError as e:
        logger.error(f"Validation could not be performed: {e}")
        sys.exit(EXIT_ERROR)
    except Exception as e:
        logger.error(f"Validation Failed: {e}")
        sys.exit(EXIT_ERROR)

    if args.json:
        print(json.dumps(report.to_document(), indent=2))
    else:
        render_report(report, out_console)

    sys.exit(EXIT_FAILURES if report.has_failures else EXIT_OK)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        sys.exit(EXIT_INTERRUPTED)
