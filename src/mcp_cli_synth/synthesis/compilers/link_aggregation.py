"""Link aggregation: one aggregate interface per device and its members.

Mode is accepted in any vendor's vocabulary and normalized to LACP or
static: "lacp", "dynamic", "lacp-static", "active" and "passive" negotiate,
anything else bundles statically.
"""
from typing import Iterable

from ..resolver import connected_port_names, vlan_list_for
from ..schema import (
    Connection,
    Device,
    Feature,
    LinkAggregationConfig,
    LinkAggregationMember,
    LinkMode,
)
from .base import CompileContext, FeatureCompiler

LACP_MODES = frozenset({"lacp", "dynamic", "lacp-static", "active", "passive"})
DEFAULT_PRIORITY = "32768"


def uses_lacp(mode: str) -> bool:
    return mode.lower() in LACP_MODES


def detect_link_aggregation_members(
    device: Device, connections: Iterable[Connection]
) -> tuple[LinkAggregationMember, ...]:
    """Members inferred from the device's wired ports, one per unique port name."""
    return tuple(
        LinkAggregationMember(name=name, port_priority=DEFAULT_PRIORITY)
        for name in connected_port_names(device, connections)
    )


def effective_members(
    device: Device, connections: Iterable[Connection]
) -> tuple[LinkAggregationMember, ...]:
    """Configured members, or topology-detected ones when none are listed."""
    block = device.config.link_aggregation
    named = tuple(m for m in block.members if m.name)
    if named:
        return named
    return detect_link_aggregation_members(device, connections)


def bundled_port_names(device: Device, connections: Iterable[Connection]) -> list[str]:
    """Ports owned by the aggregate, empty when link aggregation is off."""
    if not device.config.link_aggregation.enabled:
        return []
    return [m.name for m in effective_members(device, connections)]


class LinkAggregationCompiler(FeatureCompiler):
    feature = Feature.LINK_AGGREGATION
    summary = "Link aggregation"

    def _members(self, ctx: CompileContext, block: LinkAggregationConfig) -> tuple[LinkAggregationMember, ...]:
        members = effective_members(ctx.device, ctx.connections)
        if members and not any(m.name for m in block.members):
            ctx.note(f"members detected from topology: {', '.join(m.name for m in members)}")
        return members

    def _switchport(self, ctx: CompileContext, block: LinkAggregationConfig) -> list[str]:
        key = ctx.dialect.key
        mode = block.interface_mode
        if mode == LinkMode.L3:
            if key == "cisco":
                return [" no switchport"]
            return [" undo portswitch"] if key == "huawei" else []
        if mode == LinkMode.ACCESS and block.access_vlan:
            if key == "cisco":
                return [" switchport mode access", f" switchport access vlan {block.access_vlan}"]
            if key == "huawei":
                return [" port link-type access", f" port default vlan {block.access_vlan}"]
            return [f" port access vlan {block.access_vlan}"]
        if mode == LinkMode.TRUNK:
            prefix = " switchport" if key == "cisco" else " port"
            body = [f"{prefix} mode trunk" if key == "cisco" else " port link-type trunk"]
            if block.trunk_native_vlan:
                if key == "cisco":
                    body.append(f" switchport trunk native vlan {block.trunk_native_vlan}")
                else:
                    body.append(f" port trunk pvid vlan {block.trunk_native_vlan}")
            if block.trunk_allowed_vlans:
                allowed = vlan_list_for(ctx.dialect, block.trunk_allowed_vlans)
                verb = {"cisco": "switchport trunk allowed vlan", "huawei": "port trunk allow-pass vlan"}.get(
                    key, "port trunk permit vlan"
                )
                body.append(f" {verb} {allowed}")
            return body
        return []

    def emit_cisco(self, ctx: CompileContext, block: LinkAggregationConfig) -> list[str]:
        members = self._members(ctx, block)
        if not (block.group_id and members):
            return []
        lacp = uses_lacp(block.mode)
        lines: list[str] = []
        if block.load_balance_algorithm:
            lines.append(f"port-channel load-balance {block.load_balance_algorithm}")
        if lacp and block.system_priority and block.system_priority != DEFAULT_PRIORITY:
            lines.append(f"lacp system-priority {block.system_priority}")

        name = ctx.dialect.aggregate_interface(block.group_id)
        body = [f" description {block.description}"] if block.description else []
        body += self._switchport(ctx, block)
        lines += ctx.interface(name, body)

        for member in members:
            member_body = []
            if lacp:
                member_body.append(f" channel-group {block.group_id} mode {member.lacp_mode or 'active'}")
                if member.port_priority and member.port_priority != DEFAULT_PRIORITY:
                    member_body.append(f" lacp port-priority {member.port_priority}")
                if member.lacp_period == "short":
                    member_body.append(" lacp rate fast")
            else:
                member_body.append(f" channel-group {block.group_id} mode on")
            lines += ctx.interface(member.name, member_body, shutdown_toggle=True)
        return lines

    def emit_huawei(self, ctx: CompileContext, block: LinkAggregationConfig) -> list[str]:
        members = self._members(ctx, block)
        if not (block.group_id and members):
            return []
        lacp = uses_lacp(block.mode)
        lines: list[str] = []
        if lacp:
            by_system = block.huawei_lacp_priority_mode == "system-priority"
            if by_system:
                lines.append("lacp priority-command-mode system-priority")
            if block.system_priority and block.system_priority != DEFAULT_PRIORITY:
                word = "system-priority" if by_system else "priority"
                lines.append(f"lacp {word} {block.system_priority}")

        body = [" mode lacp-static" if lacp else " mode manual load-balance"]
        if block.load_balance_algorithm:
            body.append(f" load-balance {block.load_balance_algorithm}")
        if block.description:
            body.append(f' description "{block.description}"')
        if lacp:
            if block.preempt_enabled:
                body.append(" lacp preempt enable")
                # 30 seconds is the device default
                if block.preempt_delay and block.preempt_delay != "30":
                    body.append(f" lacp preempt delay {block.preempt_delay}")
            if block.timeout == "fast":
                body.append(" lacp timeout fast")
        body += self._switchport(ctx, block)
        lines += ctx.interface(ctx.dialect.aggregate_interface(block.group_id), body)

        for member in members:
            member_body = []
            if lacp and member.port_priority and member.port_priority != DEFAULT_PRIORITY:
                member_body.append(f" lacp priority {member.port_priority}")
            member_body.append(f" eth-trunk {block.group_id}")
            lines += ctx.interface(member.name, member_body)
        return lines

    def emit_h3c(self, ctx: CompileContext, block: LinkAggregationConfig) -> list[str]:
        members = self._members(ctx, block)
        if not (block.group_id and members):
            return []
        lacp = uses_lacp(block.mode)
        lines: list[str] = []
        if lacp and block.system_priority and block.system_priority != DEFAULT_PRIORITY:
            lines.append(f"lacp system-priority {block.system_priority}")
        if block.load_balance_algorithm:
            lines.append(f"link-aggregation global load-sharing mode {block.load_balance_algorithm}")

        routed = block.interface_mode == LinkMode.L3
        name = f"Route-Aggregation{block.group_id}" if routed else ctx.dialect.aggregate_interface(block.group_id)
        body = [f' description "{block.description}"'] if block.description else []
        body += self._switchport(ctx, block)
        body.append(f" link-aggregation mode {'dynamic' if lacp else 'static'}")
        lines += ctx.interface(name, body)

        for member in members:
            member_body = [f" port link-aggregation group {block.group_id}"]
            if lacp:
                if member.port_priority and member.port_priority != DEFAULT_PRIORITY:
                    member_body.append(f" link-aggregation port-priority {member.port_priority}")
                if member.lacp_mode == "passive":
                    member_body.append(" lacp mode passive")
                if member.lacp_period == "short":
                    member_body.append(" lacp period short")
            lines += ctx.interface(member.name, member_body)
        return lines
