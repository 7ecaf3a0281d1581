"""Unit tests for access point computation."""

from __future__ import annotations

from fabric_orderer_operator.access_point import assigned_node_port, compute_access_point


class TestComputeAccessPoint:
    """Test access point formatting."""

    def test_declared_host(self) -> None:
        assert compute_access_point(31000, ["10.0.0.5"], []) == "https://10.0.0.5:31000"

    def test_no_candidates(self) -> None:
        assert compute_access_point(31000, [], []) == "31000"

    def test_declared_hosts_take_priority(self) -> None:
        result = compute_access_point(31000, ["orderer.example.com"], ["192.168.1.10"])

        assert result == "https://orderer.example.com:31000"

    def test_platform_ip_used_without_declared_hosts(self) -> None:
        result = compute_access_point(30001, [], ["192.168.1.10", "192.168.1.11"])

        assert result == "https://192.168.1.10:30001"


class TestAssignedNodePort:
    """Test node port lookup on a service."""

    def test_first_port(self) -> None:
        service = {"spec": {"ports": [{"port": 7050, "nodePort": 31000}, {"port": 9443, "nodePort": 31001}]}}

        assert assigned_node_port(service) == 31000

    def test_no_ports(self) -> None:
        assert assigned_node_port({"spec": {"ports": []}}) is None
        assert assigned_node_port({}) is None

    def test_port_without_node_port(self) -> None:
        assert assigned_node_port({"spec": {"ports": [{"port": 7050}]}}) is None
        assert assigned_node_port({"spec": {"ports": [{"port": 7050, "nodePort": 0}]}}) is None
