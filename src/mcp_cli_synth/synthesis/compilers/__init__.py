"""Per-feature compilers and the registry that maps features to them."""
from typing import Union

from ..errors import UnknownFeatureError
from ..schema import Feature
from .acl import ACLCompiler
from .base import CompileContext, FeatureCompiler
from .dhcp import DHCPCompiler
from .dhcp_relay import DHCPRelayCompiler
from .dhcp_snooping import DHCPSnoopingCompiler
from .gre import GRECompiler
from .ha import HACompiler
from .interfaces import InterfaceCompiler, VLANCompiler
from .ipsec import IPsecCompiler
from .link_aggregation import LinkAggregationCompiler
from .mlag import MLAGCompiler
from .nat import NATCompiler
from .object_groups import ObjectGroupCompiler
from .port_isolation import PortIsolationCompiler
from .routing import RoutingCompiler
from .security import SecurityCompiler
from .ssh import SSHCompiler
from .stacking import StackingCompiler
from .stp import STPCompiler
from .vrrp import VRRPCompiler
from .wireless import WirelessCompiler

COMPILERS: dict[Feature, FeatureCompiler] = {
    compiler.feature: compiler
    for compiler in (
        DHCPCompiler(),
        DHCPRelayCompiler(),
        DHCPSnoopingCompiler(),
        VLANCompiler(),
        InterfaceCompiler(),
        LinkAggregationCompiler(),
        PortIsolationCompiler(),
        StackingCompiler(),
        MLAGCompiler(),
        STPCompiler(),
        RoutingCompiler(),
        VRRPCompiler(),
        WirelessCompiler(),
        ACLCompiler(),
        NATCompiler(),
        SSHCompiler(),
        SecurityCompiler(),
        ObjectGroupCompiler(),
        IPsecCompiler(),
        HACompiler(),
        GRECompiler(),
    )
}


def parse_feature(name: Union[Feature, str]) -> Feature:
    """Accept a Feature, its display name ("DHCP Relay") or its key ("dhcp_relay").

    Raises:
        UnknownFeatureError: If the name matches no feature
    """
    if isinstance(name, Feature):
        return name
    for feature in Feature:
        if name in (feature.value, feature.key) or name.lower() == feature.value.lower():
            return feature
    raise UnknownFeatureError(f"Unknown feature: {name}")


def get_compiler(feature: Union[Feature, str]) -> FeatureCompiler:
    """Look up the compiler for a feature."""
    return COMPILERS[parse_feature(feature)]


__all__ = [
    "COMPILERS",
    "CompileContext",
    "FeatureCompiler",
    "get_compiler",
    "parse_feature",
]
