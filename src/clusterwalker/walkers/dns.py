import socket


def resolve_host(hostname: str) -> list[str]:
    """
    Returns every IPv4/IPv6 address the host resolves to.
    Raises socket.gaierror when the name cannot be resolved.
    """
    infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    return sorted({str(info[4][0]) for info in infos})
