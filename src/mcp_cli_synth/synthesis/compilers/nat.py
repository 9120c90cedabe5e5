"""Network address translation.

Every ACL reference is resolved against the ACL block at compile time. A rule
that cannot work without its ACL is dropped; a rule where the ACL only
narrows the match keeps everything but the ACL clause.
"""
from typing import Optional

from ..resolver import ACLRef, address_object_exists, prefix_length, resolve_acl
from ..schema import (
    Feature,
    NATAddressPool,
    NATConfig,
    NATPortMapping,
    NATServer,
    NATSourceRule,
    NATStaticRule,
)
from .base import CompileContext, FeatureCompiler

PORTED_PROTOCOLS = ("tcp", "udp", "sctp")

# (command, explanation)
Clause = tuple[str, str]


def _acl(ctx: CompileContext, owner: str, acl_id: str) -> Optional[ACLRef]:
    """Resolve an ACL for a NAT entry, noting the omission when it is dangling."""
    if not acl_id:
        return None
    ref = resolve_acl(ctx.config, acl_id)
    if ref is None:
        ctx.note(f"{owner}: referenced ACL '{acl_id}' not found, ACL clause omitted")
    return ref


def _static_label(rule: NATStaticRule) -> str:
    return (
        rule.local_ip or rule.local_start_ip or rule.local_network
        or rule.local_address_group or rule.global_ip or "rule"
    )


def _pool_name(pool: NATAddressPool) -> str:
    return pool.name or pool.group_id


def _action_text(rule: NATSourceRule) -> str:
    if rule.action == "no-nat":
        return "exempts matching traffic from NAT"
    if rule.action == "easy-ip" or not rule.address_group:
        return "translates matching traffic to the egress interface address (Easy IP)"
    text = f"translates matching traffic using address pool '{rule.address_group}'"
    return text + " without port translation" if rule.action == "no-pat" else text


class NATCompiler(FeatureCompiler):
    feature = Feature.NAT
    summary = "NAT"

    # --- Cisco ---

    def emit_cisco(self, ctx: CompileContext, block: NATConfig) -> list[str]:
        lines: list[str] = []
        for pool in block.address_pools:
            name = _pool_name(pool)
            ranges = pool.address_ranges
            if not (name and ranges):
                continue
            if not pool.netmask:
                ctx.note(f"pool {name}: IOS pools need a netmask, pool skipped")
                continue
            if len(ranges) > 1:
                ctx.note(f"pool {name}: IOS pools hold one range, only the first section is used")
            first = ranges[0]
            end = first.end_address or first.start_address
            ctx.add(
                lines,
                f"ip nat pool {name} {first.start_address} {end} netmask {pool.netmask}",
                f"Defines NAT pool '{name}' covering {first.start_address} to {end}.",
            )

        for rule in block.static_rules:
            clause = self._cisco_static(ctx, rule)
            if clause:
                ctx.add(lines, *clause)

        for mapping in block.port_mappings:
            clause = self._cisco_port_mapping(ctx, mapping)
            if clause:
                ctx.add(lines, *clause)

        for rule in block.source_rules:
            clause = self._cisco_source(ctx, block, rule)
            if clause:
                ctx.add(lines, *clause)

        if lines:
            ctx.note("mark interfaces with 'ip nat inside' / 'ip nat outside' for translations to apply")
        return lines

    @staticmethod
    def _cisco_static(ctx: CompileContext, rule: NATStaticRule) -> Optional[Clause]:
        inbound = rule.direction == "inbound"
        if rule.type == "one-to-one" and rule.local_ip and rule.global_ip:
            if inbound:
                return (
                    f"ip nat outside source static {rule.global_ip} {rule.local_ip}",
                    f"Maps outside address {rule.global_ip} to {rule.local_ip} on the inside.",
                )
            return (
                f"ip nat inside source static {rule.local_ip} {rule.global_ip}",
                f"Maps inside host {rule.local_ip} to {rule.global_ip} one-to-one.",
            )
        if rule.type == "net-to-net":
            if inbound and rule.global_start_ip and rule.local_network and rule.local_mask:
                return (
                    f"ip nat outside source static network {rule.global_start_ip} "
                    f"{rule.local_network} {rule.local_mask}",
                    f"Maps outside network {rule.global_start_ip} onto {rule.local_network}/{rule.local_mask}.",
                )
            if not inbound and rule.local_start_ip and rule.global_network and rule.global_mask:
                return (
                    f"ip nat inside source static network {rule.local_start_ip} "
                    f"{rule.global_network} {rule.global_mask}",
                    f"Maps inside network {rule.local_start_ip} onto {rule.global_network}/{rule.global_mask}.",
                )
        if rule.type == "address-group":
            ctx.note(f"static NAT {_static_label(rule)}: object-group mappings are not available on IOS, rule omitted")
        return None

    @staticmethod
    def _cisco_port_mapping(ctx: CompileContext, mapping: NATPortMapping) -> Optional[Clause]:
        if mapping.mapping_type != "single":
            ctx.note(f"port mapping to {mapping.local_address}: only single-port mappings are rendered for IOS")
            return None
        if not (mapping.local_address and mapping.local_port and mapping.global_port):
            return None
        protocol = mapping.protocol if mapping.protocol in ("tcp", "udp") else "tcp"
        if mapping.global_address_type == "interface":
            if not mapping.interface_name:
                return None
            outside = f"interface {mapping.interface_name} {mapping.global_port}"
            shown = f"{mapping.interface_name} port {mapping.global_port}"
        elif mapping.global_address:
            outside = f"{mapping.global_address} {mapping.global_port}"
            shown = f"{mapping.global_address}:{mapping.global_port}"
        else:
            return None
        return (
            f"ip nat inside source static {protocol} {mapping.local_address} {mapping.local_port} {outside}",
            f"Publishes {protocol} {mapping.local_address}:{mapping.local_port} as {shown}.",
        )

    def _cisco_source(self, ctx: CompileContext, block: NATConfig, rule: NATSourceRule) -> Optional[Clause]:
        owner = f"source rule {rule.name}" if rule.name else "source rule"
        if not rule.enabled or rule.action == "no-nat":
            return None
        acl_id = rule.acl_id or (rule.source_value if rule.source_type == "acl" else "")
        if not acl_id:
            ctx.note(f"{owner}: IOS dynamic NAT matches traffic by ACL, none given, rule omitted")
            return None
        ref = _acl(ctx, owner, acl_id)
        if ref is None:
            return None
        line = f"ip nat inside source list {ref.label}"
        if rule.action == "easy-ip":
            if not rule.outside_interface:
                ctx.note(f"{owner}: easy-ip needs an outside interface, rule omitted")
                return None
            return (
                f"{line} interface {rule.outside_interface} overload",
                f"Translates traffic matched by ACL {ref.label} to the address of "
                f"{rule.outside_interface}, sharing it by port (PAT).",
            )
        pool = next(
            (p for p in block.address_pools if rule.address_group in (p.name, p.group_id)),
            None,
        ) if rule.address_group else None
        if pool is None:
            ctx.note(f"{owner}: address pool '{rule.address_group}' not found, rule omitted")
            return None
        line += f" pool {_pool_name(pool)}"
        text = f"Translates traffic matched by ACL {ref.label} using pool '{_pool_name(pool)}'"
        if rule.action == "no-pat":
            return line, text + " one address per host."
        return f"{line} overload", text + " with port translation."

    # --- Huawei ---

    def emit_huawei(self, ctx: CompileContext, block: NATConfig) -> list[str]:
        lines: list[str] = []
        for pool in block.address_pools:
            name = _pool_name(pool)
            ranges = pool.address_ranges
            if not (name and ranges):
                continue
            header = f"nat address-group {name}"
            if pool.name and pool.group_id:
                header += f" {pool.group_id}"
            ctx.add(lines, header, f"Creates NAT address pool '{name}'.")
            for section in ranges:
                command = " section"
                if section.section_id:
                    command += f" {section.section_id}"
                command += f" {section.start_address}"
                if section.end_address:
                    command += f" {section.end_address}"
                ctx.add(
                    lines,
                    command,
                    f"Adds {section.start_address} to {section.end_address or section.start_address} to the pool.",
                )
            mode = pool.mode or block.pool_mode
            ctx.add(lines, f" mode {mode}", f"Sets the pool to {mode} mode.")
            if pool.route_enable:
                ctx.add(
                    lines,
                    " route enable",
                    "Advertises a blackhole route for the pool to prevent routing loops.",
                )
            lines.append("quit")

        rules = [r for r in block.source_rules if r.name]
        if rules:
            ctx.add(lines, "nat-policy", "Enters the NAT policy view; rules are matched top down.")
            for rule in rules:
                lines += self._huawei_rule(ctx, rule)
            lines.append("quit")

        for server in block.servers:
            if server.name:
                ctx.add(
                    lines,
                    self._huawei_server(ctx, server),
                    f"Publishes internal server '{server.name}' ({server.inside_address}) to the outside.",
                )

        if block.static_rules or block.port_mappings:
            ctx.note("static rules and port mappings are expressed as NAT servers on VRP, not rendered")
        return lines

    def _huawei_match(self, ctx: CompileContext, rule: NATSourceRule, direction: str) -> Optional[str]:
        kind = getattr(rule, f"{direction}_type")
        value = getattr(rule, f"{direction}_value")
        mask = getattr(rule, f"{direction}_mask")
        if kind == "any" or not value:
            return None
        if kind == "object-group":
            if not address_object_exists(ctx.config, value):
                ctx.note(f"NAT rule {rule.name}: address set '{value}' not found, match omitted")
                return None
            return f"  {direction}-address address-set {value}"
        if kind == "host":
            return f"  {direction}-address {value} 32"
        if kind == "subnet" and mask:
            return f"  {direction}-address {value} {prefix_length(mask)}"
        if kind == "acl":
            ctx.note(f"NAT rule {rule.name}: nat-policy cannot match by ACL, match omitted")
        return None

    def _huawei_rule(self, ctx: CompileContext, rule: NATSourceRule) -> list[str]:
        lines: list[str] = []
        ctx.add(lines, f" rule name {rule.name}", f"Rule '{rule.name}' {_action_text(rule)}.")
        if rule.description:
            lines.append(f'  description "{rule.description}"')
        if ctx.is_firewall:
            if rule.source_zone:
                lines.append(f"  source-zone {rule.source_zone}")
            if rule.destination_zone:
                lines.append(f"  destination-zone {rule.destination_zone}")
        for direction in ("source", "destination"):
            match = self._huawei_match(ctx, rule, direction)
            if match:
                lines.append(match)
        if rule.action == "no-nat":
            lines.append("  action no-nat")
        elif rule.action == "easy-ip" or not rule.address_group:
            lines.append("  action source-nat easy-ip")
        else:
            lines.append(f"  action source-nat address-group {rule.address_group}")
        if not rule.enabled:
            lines.append("  disable")
        return lines

    @staticmethod
    def _huawei_server(ctx: CompileContext, server: NATServer) -> str:
        line = f"nat server name {server.name}"
        if server.zone and ctx.is_firewall:
            line += f" zone {server.zone}"
        if server.protocol and server.protocol != "any":
            line += f" protocol {server.protocol}"
        needs_port = server.protocol in PORTED_PROTOCOLS

        line += " global"
        if server.global_interface:
            line += f" interface {server.global_interface}"
        else:
            line += f" {server.global_address}"
            if server.global_address_end:
                line += f" {server.global_address_end}"
        if needs_port and server.global_port:
            line += f" {server.global_port}"

        line += f" inside {server.inside_address}"
        if server.inside_address_end:
            line += f" {server.inside_address_end}"
        if needs_port and server.inside_port:
            line += f" {server.inside_port}"

        if server.no_reverse:
            line += " no-reverse"
        if server.route:
            line += " route"
        if server.disabled:
            line += " nat-disable"
        if server.description:
            line += f' description "{server.description}"'
        return line

    # --- H3C ---

    def emit_h3c(self, ctx: CompileContext, block: NATConfig) -> list[str]:
        lines: list[str] = []
        for pool in block.address_pools:
            ranges = pool.address_ranges
            if not (pool.group_id and ranges):
                continue
            header = f"nat address-group {pool.group_id}"
            if pool.name:
                header += f" name {pool.name}"
            ctx.add(lines, header, f"Creates NAT address group {pool.group_id}.")
            for section in ranges:
                end = section.end_address or section.start_address
                ctx.add(
                    lines,
                    f" address {section.start_address} {end}",
                    f"Adds {section.start_address} to {end} to the group.",
                )
            lines.append("quit")

        for group in block.server_groups:
            if not group.group_id:
                continue
            ctx.add(
                lines,
                f"nat server-group {group.group_id}",
                f"Creates server group {group.group_id} for load-balanced NAT servers.",
            )
            for member in group.members:
                if member.ip and member.port:
                    line = f" inside ip {member.ip} port {member.port}"
                    if member.weight:
                        line += f" weight {member.weight}"
                    lines.append(line)
            lines.append("quit")

        static_lines = 0
        for rule in block.static_rules:
            clause = self._h3c_static(ctx, rule)
            if clause:
                ctx.add(lines, *clause)
                static_lines += 1
        if static_lines and not self._static_enabled_anywhere(ctx):
            ctx.note("apply 'nat static enable' on the relevant interface(s) for static rules to take effect")

        rules = [r for r in block.source_rules if r.name]
        if rules:
            ctx.add(lines, "nat global-policy", "Enters the global NAT policy view; rules are matched top down.")
            for rule in rules:
                lines += self._h3c_policy_rule(ctx, rule)
            lines.append("quit")

        lines += self._h3c_port_mappings(ctx, block)
        return lines

    @staticmethod
    def _static_enabled_anywhere(ctx: CompileContext) -> bool:
        interfaces = (*ctx.config.vlan.vlan_interfaces, *ctx.config.interface_ip.interfaces)
        return any(i.nat_static_enable for i in interfaces)

    @staticmethod
    def _h3c_static(ctx: CompileContext, rule: NATStaticRule) -> Optional[Clause]:
        outbound = rule.direction == "outbound"
        line = f"nat static {rule.direction}"
        if rule.type == "one-to-one":
            if not (rule.local_ip and rule.global_ip):
                return None
            if outbound:
                line += f" {rule.local_ip} {rule.global_ip}"
                text = f"Translates {rule.local_ip} to {rule.global_ip} on the way out."
            else:
                line += f" {rule.global_ip} {rule.local_ip}"
                text = f"Translates {rule.global_ip} to {rule.local_ip} on the way in."
        elif rule.type == "net-to-net":
            if outbound:
                if not (rule.local_start_ip and rule.local_end_ip and rule.global_network and rule.global_mask):
                    return None
                line += (
                    f" net-to-net {rule.local_start_ip} {rule.local_end_ip}"
                    f" global {rule.global_network} {rule.global_mask}"
                )
                text = (
                    f"Translates {rule.local_start_ip}-{rule.local_end_ip} into "
                    f"{rule.global_network}/{rule.global_mask} on the way out."
                )
            else:
                if not (rule.global_start_ip and rule.global_end_ip and rule.local_network and rule.local_mask):
                    return None
                line += (
                    f" net-to-net {rule.global_start_ip} {rule.global_end_ip}"
                    f" local {rule.local_network} {rule.local_mask}"
                )
                text = (
                    f"Translates {rule.global_start_ip}-{rule.global_end_ip} into "
                    f"{rule.local_network}/{rule.local_mask} on the way in."
                )
        elif rule.type == "address-group":
            local, outside = rule.local_address_group, rule.global_address_group
            if not (local and outside):
                return None
            missing = [g for g in (local, outside) if not address_object_exists(ctx.config, g)]
            if missing:
                ctx.note(f"static NAT {_static_label(rule)}: object group '{missing[0]}' not found, rule omitted")
                return None
            first, second = (local, outside) if outbound else (outside, local)
            line += f" object-group {first} object-group {second}"
            text = f"Translates object group '{first}' to object group '{second}' on the way {'out' if outbound else 'in'}."
        else:
            return None
        ref = _acl(ctx, f"static NAT {_static_label(rule)}", rule.acl_id)
        if ref is not None:
            line += f" acl {ref.number or ref.name}"
        if rule.reversible:
            line += " reversible"
        return line, text

    def _h3c_match(self, ctx: CompileContext, rule: NATSourceRule, direction: str) -> Optional[str]:
        kind = getattr(rule, f"{direction}_type")
        value = getattr(rule, f"{direction}_value")
        mask = getattr(rule, f"{direction}_mask")
        if kind == "any" or not value:
            return None
        if kind == "object-group":
            if not address_object_exists(ctx.config, value):
                ctx.note(f"NAT rule {rule.name}: object group '{value}' not found, match omitted")
                return None
            return f"  {direction}-ip object-group-name {value}"
        if kind == "host":
            return f"  {direction}-ip host {value}"
        if kind == "subnet":
            return f"  {direction}-ip subnet {value} {mask}".rstrip()
        if kind == "acl":
            ctx.note(f"NAT rule {rule.name}: global-policy matches by object group, ACL match omitted")
        return None

    def _h3c_policy_rule(self, ctx: CompileContext, rule: NATSourceRule) -> list[str]:
        lines: list[str] = []
        ctx.add(lines, f" rule name {rule.name}", f"Rule '{rule.name}' {_action_text(rule)}.")
        if rule.description:
            lines.append(f'  description "{rule.description}"')
        if ctx.is_firewall:
            if rule.source_zone:
                lines.append(f"  source-zone {rule.source_zone}")
            if rule.destination_zone:
                lines.append(f"  destination-zone {rule.destination_zone}")
        for direction in ("source", "destination"):
            match = self._h3c_match(ctx, rule, direction)
            if match:
                lines.append(match)

        action = "  action snat"
        if rule.action == "no-nat":
            action += " no-nat"
        elif rule.action == "easy-ip" or not rule.address_group:
            action += " easy-ip"
            if rule.port_preserved:
                action += " port-preserved"
        else:
            action += f" address-group {rule.address_group}"
            if rule.action == "no-pat":
                action += " no-pat"
            elif rule.port_preserved:
                action += " port-preserved"
        lines.append(action)
        if rule.counting:
            lines.append("  counting enable")
        if not rule.enabled:
            lines.append("  disable")
        return lines

    def _h3c_port_mappings(self, ctx: CompileContext, block: NATConfig) -> list[str]:
        by_interface: dict[str, list[str]] = {}
        for mapping in block.port_mappings:
            if not mapping.interface_name:
                continue
            line = self._h3c_nat_server(ctx, mapping)
            if line:
                ctx.explain(
                    line,
                    f"Publishes {mapping.local_address or 'a server group'} on {mapping.interface_name}.",
                )
                by_interface.setdefault(mapping.interface_name, []).append(line)

        lines: list[str] = []
        for name, body in by_interface.items():
            lines += ctx.interface(name, body)
        return lines

    @staticmethod
    def _h3c_nat_server(ctx: CompileContext, mapping: NATPortMapping) -> str:
        owner = f"port mapping on {mapping.interface_name}"
        line = " nat server"
        if mapping.protocol and mapping.protocol != "all":
            line += f" protocol {mapping.protocol}"

        if mapping.mapping_type == "acl":
            ref = _acl(ctx, owner, mapping.acl_id)
            if ref is None:
                if not mapping.acl_id:
                    ctx.note(f"{owner}: ACL-based mapping without an ACL, rule omitted")
                return ""
            line += f" global {ref.number or ref.name}"
        else:
            target = "current-interface" if mapping.global_address_type == "interface" else mapping.global_address
            if not target:
                return ""
            line += f" global {target}"
            if mapping.global_port:
                line += f" {mapping.global_port}"
                if mapping.mapping_type == "port-range" and mapping.global_end_port:
                    line += f" {mapping.global_end_port}"

        if mapping.mapping_type == "load-balance":
            if not mapping.server_group_id:
                return ""
            if not any(g.group_id == mapping.server_group_id for g in ctx.config.nat.server_groups):
                ctx.note(f"{owner}: server group '{mapping.server_group_id}' not found, rule omitted")
                return ""
            line += f" inside server-group {mapping.server_group_id}"
        else:
            if not mapping.local_address:
                return ""
            line += f" inside {mapping.local_address}"
            if mapping.local_port:
                line += f" {mapping.local_port}"
                if mapping.mapping_type == "port-range" and mapping.local_end_port:
                    line += f" {mapping.local_end_port}"

        if mapping.acl_id and mapping.mapping_type != "acl":
            ref = _acl(ctx, owner, mapping.acl_id)
            if ref is not None:
                line += f" acl {ref.number or ref.name}"
        if mapping.reversible:
            line += " reversible"
        if mapping.policy_name:
            line += f" rule {mapping.policy_name}"
        return line
