"""Topology inventory."""
from .inventory import DeployTarget, TopologyInventory

__all__ = ["DeployTarget", "TopologyInventory"]
