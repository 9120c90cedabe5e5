"""Full-device script assembly.

Sections are compiled fresh from the model in a fixed order so that
definitions (object groups, ACLs, time ranges) precede the features that
reference them. The global mode wrap is applied once, here, and nowhere else.
"""
import logging
from typing import Iterable, Union

from ..utils.logging_config import timed_section_sync
from .compilers import get_compiler
from .compilers.interfaces import render_link_modes, render_vlan_database
from .compilers.link_aggregation import bundled_port_names
from .dialect import Dialect, get_dialect
from .schema import Connection, Device, Feature

logger = logging.getLogger(__name__)

LINK_MODES = "Interface Link Modes"

# Section order of the aggregate script; strings name sections that are
# rendered from topology rather than from a feature block
SECTION_ORDER: tuple[Union[Feature, str], ...] = (
    Feature.SSH,
    Feature.OBJECT_GROUPS,
    Feature.ACL,
    Feature.SECURITY,
    Feature.IPSEC,
    Feature.GRE,
    Feature.INTERFACE,
    Feature.VLAN,
    Feature.DHCP,
    Feature.DHCP_RELAY,
    Feature.DHCP_SNOOPING,
    Feature.LINK_AGGREGATION,
    LINK_MODES,
    Feature.PORT_ISOLATION,
    Feature.STACKING,
    Feature.MLAG,
    Feature.STP,
    Feature.ROUTING,
    Feature.NAT,
    Feature.VRRP,
    Feature.HA,
    Feature.WIRELESS,
)

SECTION_TITLES: dict[Union[Feature, str], str] = {
    Feature.SSH: "SSH Server",
    Feature.OBJECT_GROUPS: "Object Groups",
    Feature.ACL: "ACL and Time Ranges",
    Feature.SECURITY: "Security Zones and Policies",
    Feature.IPSEC: "IPsec",
    Feature.GRE: "GRE VPN",
    Feature.INTERFACE: "Physical Interfaces",
    Feature.VLAN: "VLAN Interfaces",
    Feature.DHCP: "DHCP Server",
    Feature.DHCP_RELAY: "DHCP Relay",
    Feature.DHCP_SNOOPING: "DHCP Snooping",
    Feature.LINK_AGGREGATION: "Link Aggregation",
    LINK_MODES: LINK_MODES,
    Feature.PORT_ISOLATION: "Port Isolation",
    Feature.STACKING: "Stacking",
    Feature.MLAG: "M-LAG",
    Feature.STP: "Spanning Tree Protocol",
    Feature.ROUTING: "Routing",
    Feature.NAT: "NAT",
    Feature.VRRP: "VRRP",
    Feature.HA: "High Availability (HA)",
    Feature.WIRELESS: "Wireless",
}


def section(dialect: Dialect, title: str, body: str) -> list[str]:
    """Comment banner followed by the section body."""
    return [
        dialect.comment_line(),
        dialect.comment_line(f"{title} Configuration"),
        dialect.comment_line(),
        body.strip(),
    ]


def _failure_line(dialect: Dialect, feature: Feature) -> str:
    return dialect.comment_line(f"{feature.value} failed to generate")


def compile_all(device: Device, connections: Iterable[Connection] = ()) -> str:
    """Build the deployable script for one device.

    Args:
        device: Device snapshot; cached per-feature output is ignored
        connections: Topology edges, passed to every section

    Returns:
        The full script wrapped once in global mode, or an empty string when
        the vendor produces no CLI or nothing is configured
    """
    dialect = get_dialect(device.vendor)
    if dialect.key == "generic":
        return ""
    connections = tuple(connections)

    with timed_section_sync("compile_all", device_id=device.id, vendor=dialect.key):
        blocks: list[list[str]] = []
        if device.name:
            blocks.append([f"{dialect.hostname_command} {device.name}"])

        vlan_db = render_vlan_database(device, dialect, connections)
        if vlan_db:
            blocks.append([
                dialect.comment_line(),
                dialect.comment_line("VLAN Database"),
                dialect.comment_line(),
                *vlan_db,
            ])

        for entry in SECTION_ORDER:
            title = SECTION_TITLES[entry]
            body = _render(entry, device, dialect, connections)
            if body:
                blocks.append(section(dialect, title, body))

        if not blocks:
            return ""
        body_lines: list[str] = []
        for block in blocks:
            if body_lines:
                body_lines.append("")
            body_lines.extend(block)
        return "\n".join(dialect.wrap(body_lines))


def _render(
    entry: Union[Feature, str],
    device: Device,
    dialect: Dialect,
    connections: tuple[Connection, ...],
) -> str:
    if entry == LINK_MODES:
        lines = render_link_modes(
            device,
            dialect,
            connections,
            exclude=bundled_port_names(device, connections),
        )
        return "\n".join(lines)

    feature = entry
    try:
        return get_compiler(feature).compile(device, connections).cli
    except Exception as e:
        logger.error(f"{feature.value} failed to generate for {device.id}: {e}", exc_info=True)
        return _failure_line(dialect, feature)

