"""Cross-reference resolution and shared formatting helpers.

Lookups scan the referenced collection on every call. Collections are small
and change often, so nothing is indexed or cached. A failed lookup returns
None; deciding what to omit and what to note is the caller's job.
"""
import ipaddress
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .dialect import Dialect
from .schema import (
    ACL,
    AddressGroup,
    Configuration,
    Connection,
    Device,
    DHCPPool,
    DomainGroup,
    IKEKeychain,
    IKEProfile,
    IPsecPolicy,
    IPsecTransformSet,
    LinkMode,
    ServiceGroup,
    TimeRange,
)


@dataclass(frozen=True)
class ACLRef:
    """How a resolved ACL is cited by other features."""
    number: str
    name: str

    @property
    def label(self) -> str:
        """Name when the ACL has one, number otherwise."""
        return self.name or self.number


# --- Lookups ---

def find_acl(config: Configuration, acl_id: str) -> Optional[ACL]:
    """Find an ACL by its id, falling back to its number or name."""
    if not acl_id:
        return None
    acls = config.acl.acls
    return (
        next((a for a in acls if a.id == acl_id), None)
        or next((a for a in acls if a.number and a.number == acl_id), None)
        or next((a for a in acls if a.name and a.name == acl_id), None)
    )


def resolve_acl(config: Configuration, acl_id: str) -> Optional[ACLRef]:
    """Resolve an ACL id to its ``{number, name}`` reference."""
    acl = find_acl(config, acl_id)
    if acl is None:
        return None
    return ACLRef(number=acl.number, name=acl.name)


def find_address_group(config: Configuration, name: str) -> Optional[AddressGroup]:
    return next((g for g in config.object_groups.address_groups if g.name == name), None)


def find_service_group(config: Configuration, name: str) -> Optional[ServiceGroup]:
    return next((g for g in config.object_groups.service_groups if g.name == name), None)


def find_domain_group(config: Configuration, name: str) -> Optional[DomainGroup]:
    return next((g for g in config.object_groups.domain_groups if g.name == name), None)


def address_object_exists(config: Configuration, name: str) -> bool:
    """Address and domain groups share one namespace on the firewall."""
    return find_address_group(config, name) is not None or find_domain_group(config, name) is not None


def find_dhcp_pool(config: Configuration, pool_name: str) -> Optional[DHCPPool]:
    return next((p for p in config.dhcp.pools if p.pool_name == pool_name), None)


def find_time_range(config: Configuration, name: str) -> Optional[TimeRange]:
    return next((t for t in config.time_ranges if t.name == name), None)


def find_transform_set(config: Configuration, set_id: str) -> Optional[IPsecTransformSet]:
    return next(
        (t for t in config.ipsec.transform_sets if set_id in (t.id, t.name) and set_id),
        None,
    )


def find_ike_profile(config: Configuration, profile_id: str) -> Optional[IKEProfile]:
    return next(
        (p for p in config.ipsec.ike_profiles if profile_id in (p.id, p.name) and profile_id),
        None,
    )


def find_keychain(config: Configuration, keychain_id: str) -> Optional[IKEKeychain]:
    return next(
        (k for k in config.ipsec.ike_keychains if keychain_id in (k.id, k.name) and keychain_id),
        None,
    )


def find_ipsec_policy(config: Configuration, policy_id: str) -> Optional[IPsecPolicy]:
    return next(
        (p for p in config.ipsec.policies if policy_id in (p.id, p.name) and policy_id),
        None,
    )


# --- VLAN lists ---

def parse_vlan_list(text: str) -> list[int]:
    """Parse "10,20-22", "10 20 to 22" or mixed forms into sorted unique ids.

    Tokens that are not numbers are ignored; ids are clamped to 1-4094.
    """
    if not text:
        return []
    normalized = re.sub(r"\s*to\s*", "-", text.strip())
    vlans: set[int] = set()
    for part in re.split(r"[,\s]+", normalized):
        if not part:
            continue
        if "-" in part:
            start_str, _, end_str = part.partition("-")
            if not (start_str.isdigit() and end_str.isdigit()):
                continue
            start, end = int(start_str), min(int(end_str), 4094)
            vlans.update(range(start, end + 1))
        elif part.isdigit():
            vlans.add(int(part))
    return sorted(v for v in vlans if 1 <= v <= 4094)


def _runs(values: list[int]) -> list[tuple[int, int]]:
    runs: list[tuple[int, int]] = []
    for value in sorted(set(values)):
        if runs and value == runs[-1][1] + 1:
            runs[-1] = (runs[-1][0], value)
        else:
            runs.append((value, value))
    return runs


def format_vlan_ranges(vlans: Iterable[int], style: str = "dash") -> str:
    """Compress VLAN ids into a range string.

    Args:
        vlans: VLAN ids in any order
        style: "dash" for Cisco ("1-3,5"), "to" for Huawei/H3C ("1 to 3 5")

    Two adjacent ids are written as a pair rather than a range.
    """
    parts: list[str] = []
    for start, end in _runs(list(vlans)):
        if start == end:
            parts.append(str(start))
        elif end == start + 1:
            parts.extend([str(start), str(end)])
        elif style == "to":
            parts.append(f"{start} to {end}")
        else:
            parts.append(f"{start}-{end}")
    return (" " if style == "to" else ",").join(parts)


def vlan_list_for(dialect: Dialect, text: str) -> str:
    """Re-render a VLAN list in the vendor's range syntax."""
    style = "dash" if dialect.key == "cisco" else "to"
    return format_vlan_ranges(parse_vlan_list(text), style)


# --- Interfaces and topology ---

def vlan_interface_names(device: Device, dialect: Dialect) -> list[str]:
    """VLAN interface names configured on a device, in list order."""
    return [
        dialect.vlan_interface(v.vlan_id)
        for v in device.config.vlan.vlan_interfaces
        if v.vlan_id
    ]


def resolve_interface(dialect: Dialect, interface_name: str = "", vlan_id: str = "") -> str:
    """Interface name from an explicit name or a VLAN id reference."""
    if interface_name:
        return interface_name
    if vlan_id:
        return dialect.vlan_interface(vlan_id)
    return ""


def connected_port_names(device: Device, connections: Iterable[Connection]) -> list[str]:
    """Names of this device's ports that appear in the topology, deduplicated."""
    names: list[str] = []
    for conn in connections:
        port_id = conn.local_port(device.id)
        if port_id is None:
            continue
        name = device.port_name(port_id)
        if name and name not in names:
            names.append(name)
    return names


def topology_vlan_ids(device: Device, connections: Iterable[Connection]) -> set[int]:
    """VLAN ids referenced by this device's link configs."""
    vlans: set[int] = set()
    for conn in connections:
        if conn.local_port(device.id) is None:
            continue
        link = conn.config
        if link.mode == LinkMode.ACCESS and link.access_vlan:
            vlans.update(parse_vlan_list(link.access_vlan))
        elif link.mode == LinkMode.TRUNK:
            vlans.update(parse_vlan_list(link.trunk_native_vlan))
            vlans.update(parse_vlan_list(link.trunk_allowed_vlans))
    return vlans


def port_base(port_name: str) -> str:
    """Port name without its trailing number: GigabitEthernet0/0/1 -> GigabitEthernet0/0/."""
    slash = port_name.rfind("/")
    if slash == -1:
        return re.sub(r"\d+$", "", port_name)
    return port_name[:slash + 1]


def expand_port_range(port_name: str, range_text: str) -> list[str]:
    """Expand "1-4,8" against a port's base name; falls back to the port itself."""
    numbers: set[int] = set()
    for part in (range_text or "").split(","):
        part = part.strip()
        if "-" in part:
            start, _, end = part.partition("-")
            if start.strip().isdigit() and end.strip().isdigit():
                numbers.update(range(int(start), int(end) + 1))
        elif part.isdigit():
            numbers.add(int(part))
    if not numbers:
        return [port_name]
    base = port_base(port_name)
    return [f"{base}{n}" for n in sorted(numbers)]


# --- Address formatting ---

def prefix_length(mask: str) -> str:
    """Dotted mask to prefix length, returned unchanged if already a length."""
    if mask.isdigit():
        return mask
    try:
        return str(ipaddress.IPv4Network(f"0.0.0.0/{mask}").prefixlen)
    except ValueError:
        return mask


def ip_to_hex(ip: str) -> str:
    """10.0.0.1 -> 0a000001, empty for invalid input."""
    try:
        return ipaddress.IPv4Address(ip).packed.hex()
    except ValueError:
        return ""


def format_mac_hyphen(mac: str) -> str:
    """aa:bb:cc:dd:ee:ff -> aabb-ccdd-eeff (Huawei/H3C form)."""
    cleaned = re.sub(r"[:.\-]", "", mac or "")
    if len(cleaned) != 12:
        return mac
    return "-".join(cleaned[i:i + 4] for i in range(0, 12, 4)).lower()


def format_mac_dotted(mac: str) -> str:
    """aa:bb:cc:dd:ee:ff -> aabb.ccdd.eeff (Cisco form)."""
    cleaned = re.sub(r"[:.\-]", "", mac or "")
    if len(cleaned) != 12:
        return mac
    return ".".join(cleaned[i:i + 4] for i in range(0, 12, 4)).lower()


def parse_address(value: str) -> tuple[str, str]:
    """Split "10.0.0.0/24", "10.0.0.0 255.255.255.0" or a host into (address, mask)."""
    value = (value or "").strip()
    if "/" in value:
        address, _, length = value.partition("/")
        try:
            network = ipaddress.IPv4Network(f"0.0.0.0/{length}")
        except ValueError:
            return address, length
        return address, str(network.netmask)
    if " " in value:
        address, _, mask = value.partition(" ")
        return address, mask.strip()
    return value, ""
