"""Layer 3 interfaces, switchport link modes and the VLAN database.

VLAN interfaces (SVIs) and routed physical interfaces share one body
renderer; they differ only in how the interface is named and in when an
empty block is still worth emitting.
"""
from typing import Iterable

from ..dialect import Dialect
from ..resolver import (
    expand_port_range,
    find_dhcp_pool,
    find_ipsec_policy,
    parse_vlan_list,
    resolve_acl,
    topology_vlan_ids,
    vlan_list_for,
)
from ..schema import (
    Connection,
    Device,
    Feature,
    InterfaceIPConfig,
    L3InterfaceOptions,
    LinkConfig,
    LinkMode,
    VLANConfig,
)
from .base import CompileContext, FeatureCompiler


def _acl_filter(ctx: CompileContext, owner: str, acl_id: str, direction: str) -> list[str]:
    if not acl_id:
        return []
    ref = resolve_acl(ctx.config, acl_id)
    if ref is None:
        ctx.note(f"{owner}: {direction} ACL '{acl_id}' not found, packet filter omitted")
        return []
    key = ctx.dialect.key
    if key == "cisco":
        return [f" ip access-group {ref.label} {'in' if direction == 'inbound' else 'out'}"]
    acl_word = f"name {ref.name}" if ref.name else ref.number
    if key == "huawei":
        return [f" traffic-filter {direction} acl {acl_word}"]
    return [f" packet-filter {acl_word} {direction}"]


def _dhcp_binding(ctx: CompileContext, owner: str, opts: L3InterfaceOptions) -> list[str]:
    if not opts.enable_dhcp:
        return []
    key = ctx.dialect.key
    if opts.dhcp_mode == "interface":
        return [" dhcp select interface"] if key == "huawei" else []
    if not opts.selected_pool:
        return []
    if find_dhcp_pool(ctx.config, opts.selected_pool) is None:
        ctx.note(f"{owner}: DHCP pool '{opts.selected_pool}' not found, DHCP binding omitted")
        return []
    if key == "huawei":
        return [f" dhcp select global pool {opts.selected_pool}"]
    if key == "h3c":
        return [" dhcp select server", f" dhcp server apply ip-pool {opts.selected_pool}"]
    # IOS binds a pool by matching its network, nothing to add on the interface
    return []


def _ipsec_apply(ctx: CompileContext, owner: str, policy_id: str) -> list[str]:
    if not policy_id:
        return []
    policy = find_ipsec_policy(ctx.config, policy_id)
    if policy is None or not policy.name:
        ctx.note(f"{owner}: IPsec policy '{policy_id}' not found, policy not applied")
        return []
    if not ctx.config.ipsec.enabled:
        ctx.note(f"{owner}: IPsec is disabled, policy '{policy.name}' not applied")
        return []
    key = ctx.dialect.key
    if key == "cisco":
        return [f" crypto map {policy.name}"]
    if key == "huawei":
        return [f" ipsec policy {policy.name}"]
    return [f" ipsec apply policy {policy.name}"]


def l3_body(ctx: CompileContext, owner: str, opts: L3InterfaceOptions, description: str = "") -> list[str]:
    """Interface sub-commands shared by SVIs and routed ports."""
    body: list[str] = []
    if description:
        body.append(f" description {description}")
    if opts.ip_address and opts.subnet_mask:
        body.append(f" ip address {opts.ip_address} {opts.subnet_mask}")
    body += _dhcp_binding(ctx, owner, opts)
    body += _acl_filter(ctx, owner, opts.packet_filter_inbound_acl_id, "inbound")
    body += _acl_filter(ctx, owner, opts.packet_filter_outbound_acl_id, "outbound")
    body += _ipsec_apply(ctx, owner, opts.ipsec_policy_id)

    key = ctx.dialect.key
    if key == "h3c":
        if opts.nat_static_enable:
            body.append(" nat static enable")
        if opts.nat_hairpin_enable:
            body.append(" nat hairpin enable")
    elif key == "huawei" and opts.huawei_nat_enable:
        body.append(" nat enable")
    return body


class VLANCompiler(FeatureCompiler):
    """VLAN interfaces. VLAN creation itself happens in the aggregate script."""

    feature = Feature.VLAN
    summary = "VLAN interfaces"

    def _emit(self, ctx: CompileContext, block: VLANConfig) -> list[str]:
        lines: list[str] = []
        for vlan in block.vlan_interfaces:
            if not (vlan.vlan_id and vlan.ip_address and vlan.subnet_mask):
                continue
            name = ctx.dialect.vlan_interface(vlan.vlan_id)
            body = l3_body(ctx, name, vlan, vlan.interface_description)
            lines += ctx.interface(name, body, shutdown_toggle=True)
        return lines

    emit_cisco = _emit
    emit_huawei = _emit
    emit_h3c = _emit


class InterfaceCompiler(FeatureCompiler):
    """Routed physical interfaces."""

    feature = Feature.INTERFACE
    summary = "Physical interface addressing"

    def _emit(self, ctx: CompileContext, block: InterfaceIPConfig) -> list[str]:
        lines: list[str] = []
        for intf in block.interfaces:
            if not intf.interface_name:
                continue
            body = l3_body(ctx, intf.interface_name, intf, intf.description)
            if body:
                lines += ctx.interface(intf.interface_name, body, shutdown_toggle=True)
        return lines

    emit_cisco = _emit
    emit_huawei = _emit
    emit_h3c = _emit


# --- Switchport link modes ---

def link_mode_body(dialect: Dialect, link: LinkConfig) -> list[str]:
    """Switchport sub-commands for one link end."""
    key = dialect.key
    if link.mode == LinkMode.L3:
        if key == "cisco":
            return [" no switchport"]
        return [" undo portswitch"] if key == "huawei" else [" port link-mode route"]

    if link.mode == LinkMode.ACCESS:
        vlan = link.access_vlan or "1"
        if key == "cisco":
            return [" switchport mode access", f" switchport access vlan {vlan}"]
        if key == "huawei":
            return [" port link-type access", f" port default vlan {vlan}"]
        return [f" port access vlan {vlan}"]

    if link.mode == LinkMode.TRUNK:
        allowed = vlan_list_for(dialect, link.trunk_allowed_vlans or "1-4094")
        native = link.trunk_native_vlan
        if key == "cisco":
            body = [" switchport mode trunk"]
            if native:
                body.append(f" switchport trunk native vlan {native}")
            body.append(f" switchport trunk allowed vlan {allowed}")
            return body
        body = [" port link-type trunk"]
        if native:
            body.append(f" port trunk pvid vlan {native}")
        verb = "allow-pass" if key == "huawei" else "permit"
        body.append(f" port trunk {verb} vlan {allowed}")
        return body
    return []


def render_link_modes(
    device: Device,
    dialect: Dialect,
    connections: Iterable[Connection],
    exclude: Iterable[str] = (),
) -> list[str]:
    """Interface blocks for every wired port except those in ``exclude``.

    ``exclude`` carries the link aggregation members, which take their
    switchport mode from the aggregate interface instead.
    """
    if dialect.key == "generic":
        return []
    bundled = set(exclude)

    lines: list[str] = []
    for conn in connections:
        port_id = conn.local_port(device.id)
        if port_id is None:
            continue
        port_name = device.port_name(port_id)
        if not port_name or port_name in bundled:
            continue
        body = link_mode_body(dialect, conn.config)
        if not body:
            continue
        ports = expand_port_range(port_name, conn.config.apply_to_port_range)
        for name in ports:
            lines += [f"interface {name}", *body, dialect.block_exit]
    return lines


# --- VLAN database ---

def collect_vlan_ids(device: Device, connections: Iterable[Connection]) -> list[int]:
    """VLAN ids the device must create, sorted numerically."""
    config = device.config
    vlans: set[int] = set()
    for vlan in config.vlan.vlan_interfaces:
        vlans.update(parse_vlan_list(vlan.vlan_id))

    lag = config.link_aggregation
    if lag.enabled:
        if lag.interface_mode == LinkMode.ACCESS:
            vlans.update(parse_vlan_list(lag.access_vlan))
        elif lag.interface_mode == LinkMode.TRUNK:
            vlans.update(parse_vlan_list(lag.trunk_native_vlan))
            vlans.update(parse_vlan_list(lag.trunk_allowed_vlans))

    vlans.update(topology_vlan_ids(device, connections))
    return sorted(vlans)


def render_vlan_database(device: Device, dialect: Dialect, connections: Iterable[Connection]) -> list[str]:
    """VLAN creation commands with descriptions taken from the VLAN interfaces."""
    vlan_ids = collect_vlan_ids(device, connections)
    if not vlan_ids or dialect.key == "generic":
        return []

    descriptions = {
        int(v.vlan_id): v.vlan_description
        for v in device.config.vlan.vlan_interfaces
        if v.vlan_id.isdigit() and v.vlan_description
    }

    lines: list[str] = []
    if dialect.key == "cisco":
        for vlan_id in vlan_ids:
            lines.append(f"vlan {vlan_id}")
            if vlan_id in descriptions:
                lines.append(f" name {descriptions[vlan_id]}")
            lines.append("exit")
        return lines

    if dialect.key == "huawei":
        lines.append(f"vlan batch {' '.join(str(v) for v in vlan_ids)}")
    else:
        lines += [f"vlan {r}" for r in _h3c_ranges(vlan_ids)]

    for vlan_id in vlan_ids:
        if vlan_id in descriptions:
            lines += [f"vlan {vlan_id}", f" description {descriptions[vlan_id]}", "quit"]
    return lines


def _h3c_ranges(vlan_ids: list[int]) -> list[str]:
    ranges: list[str] = []
    start = end = vlan_ids[0]
    for vlan_id in vlan_ids[1:]:
        if vlan_id == end + 1:
            end = vlan_id
            continue
        ranges.append(str(start) if start == end else f"{start} to {end}")
        start = end = vlan_id
    ranges.append(str(start) if start == end else f"{start} to {end}")
    return ranges
