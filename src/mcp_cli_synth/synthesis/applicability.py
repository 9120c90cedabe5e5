"""Feature applicability matrix.

Maps a feature to the device types it is legal on. A feature absent from the
table is applicable everywhere. Vendor-only restrictions live with the
feature's compiler (``FeatureCompiler.vendors``), not here.
"""
from .schema import DeviceType, Feature

_ROUTED = {DeviceType.ROUTER, DeviceType.L3_SWITCH, DeviceType.FIREWALL}
_SWITCHES = {DeviceType.L2_SWITCH, DeviceType.L3_SWITCH}

FEATURE_APPLICABILITY: dict[Feature, frozenset[DeviceType]] = {
    Feature.SECURITY: frozenset({DeviceType.FIREWALL}),
    Feature.OBJECT_GROUPS: frozenset({DeviceType.FIREWALL}),
    Feature.SSH: frozenset(_ROUTED | _SWITCHES | {DeviceType.ACCESS_CONTROLLER}),
    Feature.DHCP: frozenset(_ROUTED | {DeviceType.ACCESS_CONTROLLER}),
    Feature.DHCP_RELAY: frozenset(_ROUTED),
    Feature.DHCP_SNOOPING: frozenset(_SWITCHES),
    Feature.VLAN: frozenset(_SWITCHES | {DeviceType.ROUTER, DeviceType.ACCESS_CONTROLLER}),
    Feature.INTERFACE: frozenset({DeviceType.ROUTER, DeviceType.FIREWALL}),
    Feature.LINK_AGGREGATION: frozenset(
        _ROUTED | _SWITCHES | {DeviceType.ACCESS_CONTROLLER}
    ),
    Feature.PORT_ISOLATION: frozenset(_SWITCHES),
    Feature.STACKING: frozenset(_SWITCHES),
    Feature.MLAG: frozenset(_SWITCHES),
    Feature.STP: frozenset(_SWITCHES),
    Feature.ROUTING: frozenset(_ROUTED | {DeviceType.ACCESS_CONTROLLER}),
    Feature.VRRP: frozenset(_ROUTED),
    Feature.HA: frozenset({DeviceType.FIREWALL}),
    Feature.ACL: frozenset(_ROUTED),
    Feature.NAT: frozenset({DeviceType.ROUTER, DeviceType.FIREWALL}),
    Feature.WIRELESS: frozenset({DeviceType.ACCESS_CONTROLLER}),
    Feature.IPSEC: frozenset({DeviceType.FIREWALL, DeviceType.ROUTER}),
    Feature.GRE: frozenset({DeviceType.ROUTER, DeviceType.FIREWALL}),
}


def is_applicable(feature: Feature, device_type: DeviceType) -> bool:
    """Check whether a feature may be configured on a device type."""
    allowed = FEATURE_APPLICABILITY.get(feature)
    if allowed is None:
        return True
    return device_type in allowed


def applicable_features(device_type: DeviceType) -> list[Feature]:
    """All features legal on a device type, in declaration order."""
    return [f for f in Feature if is_applicable(f, device_type)]
