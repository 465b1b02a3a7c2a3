from urllib.parse import urlsplit

from ..core import PLACEHOLDER_IP, PLACEHOLDER_IPV6
from ..errors import EndpointResolutionError
from ..schemas.cluster import ClusterSpec
from ..schemas.validation import FailureKind, ValidationReport
from .interfaces import Resolver


def _api_hostname(api_host: str) -> str:
    try:
        # Bare hosts ("api.example.com") carry no scheme; give them one so
        # urlsplit puts the host in netloc.
        target = api_host if "://" in api_host else f"https://{api_host}"
        hostname = urlsplit(target).hostname
    except ValueError as e:
        raise EndpointResolutionError(
            f"unable to parse Kubernetes cluster API URL: {e}"
        ) from e
    if not hostname:
        raise EndpointResolutionError(
            f"unable to parse Kubernetes cluster API URL: no host in {api_host!r}"
        )
    return hostname


def find_placeholder_address(api_host: str, resolver: Resolver) -> str | None:
    """
    Resolves the API host and returns the placeholder address it still points
    at, or None once DNS has been updated.
    """
    hostname = _api_hostname(api_host)
    try:
        addresses = resolver(hostname)
    except Exception as e:
        raise EndpointResolutionError(
            f"unable to resolve Kubernetes cluster API URL dns: {e}"
        ) from e

    for address in sorted(addresses):
        if address in (PLACEHOLDER_IP, PLACEHOLDER_IPV6):
            return address
    return None


def check_api_endpoint(
    cluster: ClusterSpec, resolver: Resolver, report: ValidationReport
) -> bool:
    """Records a dns failure and returns True if validation must stop here."""
    placeholder = find_placeholder_address(cluster.api_host, resolver)
    if placeholder is None:
        return False

    provider = cluster.external_dns_provider.value
    message = (
        "Validation Failed\n\n"
        f"The {provider} Kubernetes deployment has not updated the Kubernetes "
        "cluster's API DNS entry to the correct IP address."
        "  The API DNS IP address is the placeholder address that was created "
        f"at bootstrap: {placeholder}."
        "  Please wait about 5-10 minutes for a control plane node to start, "
        f"{provider} to launch, and DNS to propagate."
        f"  The protokube container and {provider} deployment logs may contain "
        "more diagnostic information."
        "  Etcd and the API DNS entries must be updated for the cluster to start."
    )
    report.add_failure(FailureKind.DNS, "apiserver", message)
    return True
