"""Kubernetes operator converging Hyperledger Fabric orderer nodes."""

__version__ = "0.1.0"
