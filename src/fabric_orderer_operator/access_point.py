"""Access point computation for Orderer status."""

from __future__ import annotations

from typing import Sequence


def compute_access_point(
    port: int,
    declared_hosts: Sequence[str],
    platform_host_ips: Sequence[str],
) -> str:
    """Compute the externally reachable address of an orderer.

    Declared hosts take priority over node addresses. Without any candidate
    only the port is exposed.

    Args:
        port: Node port assigned to the orderer service
        declared_hosts: Hosts from the Orderer spec
        platform_host_ips: Addresses of the cluster nodes

    Returns:
        ``https://<host>:<port>`` or the bare port number
    """
    candidates = [*declared_hosts, *platform_host_ips]
    if candidates:
        return f"https://{candidates[0]}:{port}"
    return str(port)


def assigned_node_port(service: dict) -> int | None:
    """Return the node port of the first service port, if the platform assigned one."""
    ports = (service.get("spec") or {}).get("ports") or []
    if not ports:
        return None
    node_port = ports[0].get("nodePort") or 0
    return node_port if node_port > 0 else None
