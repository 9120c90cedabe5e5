"""ACLs and the time ranges they reference."""
from datetime import date
from typing import Optional

from ..resolver import find_time_range
from ..schema import ACL, ACLRule, ACLsConfig, Feature, TimeRange
from .base import CompileContext, FeatureCompiler

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
WORKING_DAYS = frozenset(WEEKDAYS[:5])
OFF_DAYS = frozenset(WEEKDAYS[5:])


def day_selection(days: tuple[str, ...], vendor_key: str) -> str:
    """Render a day selection, collapsing full weeks and weekends to keywords."""
    selected = {d.lower() for d in days}
    cisco = vendor_key == "cisco"
    if "daily" in selected or selected >= set(WEEKDAYS):
        return "daily"
    if "working-day" in selected or selected == WORKING_DAYS:
        return "weekdays" if cisco else "working-day"
    if "off-day" in selected or selected == OFF_DAYS:
        return "weekend" if cisco else "off-day"

    names = []
    for day in WEEKDAYS:
        if day not in selected:
            continue
        if cisco:
            names.append(day.capitalize())
        elif vendor_key == "huawei":
            names.append(day[:3].capitalize())
        else:
            names.append(day[:3])
    return " ".join(names)


def _cisco_date(time: str, iso_date: str) -> str:
    """14:00 + 2024-01-31 -> '14:00 31 Jan 2024'."""
    try:
        day = date.fromisoformat(iso_date)
    except ValueError:
        return f"{time} {iso_date}"
    return f"{time} {day.day:02d} {day.strftime('%b')} {day.year}"


def render_time_range(time_range: TimeRange, vendor_key: str) -> list[str]:
    """Commands for one time range; empty when it has no usable period."""
    periodic = ""
    if time_range.periodic_enabled and time_range.start_time and time_range.end_time:
        days = day_selection(time_range.days, vendor_key)
        if days:
            periodic = f"{time_range.start_time} to {time_range.end_time} {days}"

    absolute_from = absolute_to = ""
    if time_range.absolute_enabled:
        if time_range.from_time and time_range.from_date:
            absolute_from = (time_range.from_time, time_range.from_date)
        if time_range.to_time and time_range.to_date:
            absolute_to = (time_range.to_time, time_range.to_date)

    if not (periodic or absolute_from or absolute_to):
        return []

    if vendor_key == "cisco":
        lines = [f"time-range {time_range.name}"]
        if periodic:
            lines.append(f" periodic {days} {time_range.start_time} to {time_range.end_time}")
        if absolute_from or absolute_to:
            clause = " absolute"
            if absolute_from:
                clause += f" start {_cisco_date(*absolute_from)}"
            if absolute_to:
                clause += f" end {_cisco_date(*absolute_to)}"
            lines.append(clause)
        lines.append("exit")
        return lines

    command = f"time-range {time_range.name}"
    if periodic:
        command += f" {periodic}"
    if absolute_from:
        command += f" from {absolute_from[0]} {absolute_from[1].replace('-', '/')}"
    if absolute_to:
        command += f" to {absolute_to[0]} {absolute_to[1].replace('-', '/')}"
    return [command]


# --- Rule clauses ---

def _address(keyword: str, is_any: bool, address: str, wildcard: str) -> str:
    if is_any or not address:
        return f" {keyword} any"
    return f" {keyword} {address} {wildcard or '0.0.0.0'}"


def _port(keyword: str, operator: str, port1: str, port2: str) -> str:
    if not (operator and port1):
        return ""
    clause = f" {keyword} {operator} {port1}"
    if operator == "range" and port2:
        clause += f" {port2}"
    return clause


def _time_range_clause(ctx: CompileContext, acl_label: str, rule: ACLRule) -> str:
    if not rule.time_range:
        return ""
    if find_time_range(ctx.config, rule.time_range) is None:
        ctx.note(f"ACL {acl_label}: time range '{rule.time_range}' is not defined, clause omitted")
        return ""
    return f" time-range {rule.time_range}"


def _rule_head(rule: ACLRule) -> str:
    head = " rule"
    if rule.rule_id:
        head += f" {rule.rule_id}"
    return f"{head} {rule.action}"


def _comware_rule(ctx: CompileContext, acl: ACL, rule: ACLRule, huawei: bool) -> str:
    """Rule text shared by VRP and Comware, which differ only in a few keywords."""
    label = acl.name or acl.number
    clause = _rule_head(rule)
    if acl.type == "basic":
        clause += _address("source", rule.source_is_any, rule.source_address, rule.source_wildcard)
    else:
        clause += f" {rule.protocol or 'ip'}"
        clause += _address("source", rule.source_is_any, rule.source_address, rule.source_wildcard)
        clause += _address(
            "destination", rule.destination_is_any, rule.destination_address, rule.destination_wildcard
        )
        if rule.protocol in ("tcp", "udp"):
            clause += _port("source-port", rule.source_port_operator, rule.source_port1, rule.source_port2)
            clause += _port(
                "destination-port",
                rule.destination_port_operator,
                rule.destination_port1,
                rule.destination_port2,
            )
        if rule.protocol == "tcp":
            if rule.established:
                clause += " tcp-flag established" if huawei else " established"
            elif rule.tcp_flags:
                if huawei:
                    clause += f" tcp-flag {' '.join(rule.tcp_flags)}"
                else:
                    clause += "".join(f" {flag} 1" for flag in rule.tcp_flags)
        if rule.protocol == "icmp" and rule.icmp_type:
            clause += f" icmp-type {rule.icmp_type}"
            if rule.icmp_code:
                clause += f" {rule.icmp_code}"
        if rule.dscp:
            clause += f" dscp {rule.dscp}"
        if rule.precedence:
            clause += f" precedence {rule.precedence}"
        if rule.tos:
            clause += f" tos {rule.tos}"

    if rule.fragment:
        clause += " fragment-type fragment" if huawei else " fragment"
    if rule.logging:
        clause += " logging"
    if rule.counting and not huawei:
        clause += " counting"
    clause += _time_range_clause(ctx, label, rule)
    if rule.vpn_instance and not huawei:
        clause += f" vpn-instance {rule.vpn_instance}"
    return clause


def _cisco_address(is_any: bool, address: str, wildcard: str) -> str:
    if is_any or not address:
        return " any"
    if not wildcard or wildcard == "0.0.0.0":
        return f" host {address}"
    return f" {address} {wildcard}"


def _cisco_port(operator: str, port1: str, port2: str) -> str:
    if not (operator and port1):
        return ""
    if operator == "range" and port2:
        return f" range {port1} {port2}"
    return f" {operator} {port1}"


def describe_rule(acl: ACL, rule: ACLRule) -> str:
    """One sentence saying what a rule matches."""
    advanced = acl.type == "advanced"
    verb = "Permits" if rule.action == "permit" else "Denies"
    text = f"{verb} {rule.protocol or 'ip'} traffic" if advanced else f"{verb} traffic"
    text += f" from {_describe_address(rule.source_is_any, rule.source_address, rule.source_wildcard)}"
    if advanced:
        text += " to " + _describe_address(
            rule.destination_is_any, rule.destination_address, rule.destination_wildcard
        )
        if rule.protocol in ("tcp", "udp") and rule.destination_port_operator and rule.destination_port1:
            text += f", destination port {rule.destination_port_operator} {rule.destination_port1}"
    if rule.time_range:
        text += f", only during '{rule.time_range}'"
    return text + "."


def _describe_address(is_any: bool, address: str, wildcard: str) -> str:
    if is_any or not address:
        return "any address"
    return f"{address} wildcard {wildcard or '0.0.0.0'}"


class ACLCompiler(FeatureCompiler):
    feature = Feature.ACL
    summary = "Access control lists"

    def _time_ranges(self, ctx: CompileContext) -> list[str]:
        lines: list[str] = []
        for time_range in ctx.config.time_ranges:
            if not time_range.name:
                continue
            rendered = render_time_range(time_range, ctx.dialect.key)
            if rendered:
                ctx.explain(rendered[0], f"Defines time range '{time_range.name}' for rules to reference.")
            lines += rendered
        return lines

    def emit_cisco(self, ctx: CompileContext, block: ACLsConfig) -> list[str]:
        lines = self._time_ranges(ctx)
        for acl in block.acls:
            label = acl.name or acl.number
            if not label:
                continue
            kind = "extended" if acl.type == "advanced" else "standard"
            ctx.add(lines, f"ip access-list {kind} {label}", f"Creates {kind} ACL '{label}'.")
            if acl.description:
                lines.append(f" remark {acl.description}")
            for rule in acl.rules:
                if rule.description:
                    lines.append(f" remark {rule.description}")
                ctx.add(lines, self._cisco_rule(ctx, acl, rule), describe_rule(acl, rule))
            lines.append("exit")
        return lines

    def _cisco_rule(self, ctx: CompileContext, acl: ACL, rule: ACLRule) -> str:
        clause = " "
        if rule.rule_id:
            clause += f"{rule.rule_id} "
        clause += rule.action
        if acl.type != "advanced":
            clause += _cisco_address(rule.source_is_any, rule.source_address, rule.source_wildcard)
        else:
            clause += f" {rule.protocol or 'ip'}"
            clause += _cisco_address(rule.source_is_any, rule.source_address, rule.source_wildcard)
            if rule.protocol in ("tcp", "udp"):
                clause += _cisco_port(rule.source_port_operator, rule.source_port1, rule.source_port2)
            clause += _cisco_address(
                rule.destination_is_any, rule.destination_address, rule.destination_wildcard
            )
            if rule.protocol in ("tcp", "udp"):
                clause += _cisco_port(
                    rule.destination_port_operator, rule.destination_port1, rule.destination_port2
                )
            if rule.protocol == "tcp":
                if rule.established:
                    clause += " established"
                elif rule.tcp_flags:
                    clause += "".join(f" {flag}" for flag in rule.tcp_flags)
            if rule.protocol == "icmp" and rule.icmp_type:
                clause += f" {rule.icmp_type}"
                if rule.icmp_code:
                    clause += f" {rule.icmp_code}"
            if rule.dscp:
                clause += f" dscp {rule.dscp}"
            elif rule.precedence:
                clause += f" precedence {rule.precedence}"
            if rule.tos:
                clause += f" tos {rule.tos}"
            if rule.fragment:
                clause += " fragments"
        if rule.logging:
            clause += " log"
        clause += _time_range_clause(ctx, acl.name or acl.number, rule)
        return clause

    def emit_huawei(self, ctx: CompileContext, block: ACLsConfig) -> list[str]:
        lines = self._time_ranges(ctx)
        for acl in block.acls:
            header = self._huawei_header(acl)
            if header is None:
                continue
            ctx.add(lines, header, f"Creates ACL '{acl.name or acl.number}'.")
            if acl.description:
                lines.append(f" description {acl.description}")
            if acl.step.isdigit():
                lines.append(f" step {acl.step}")
            for rule in acl.rules:
                ctx.add(lines, _comware_rule(ctx, acl, rule, huawei=True), describe_rule(acl, rule))
                if rule.description and rule.rule_id:
                    lines.append(f" rule {rule.rule_id} description {rule.description}")
            lines.append("quit")
        return lines

    @staticmethod
    def _huawei_header(acl: ACL) -> Optional[str]:
        if acl.name:
            return f"acl name {acl.name} {'advance' if acl.type == 'advanced' else 'basic'}"
        if acl.number:
            return f"acl {acl.number}"
        return None

    def emit_h3c(self, ctx: CompileContext, block: ACLsConfig) -> list[str]:
        lines = self._time_ranges(ctx)
        for acl in block.acls:
            if not acl.number:
                if acl.name:
                    ctx.note(f"ACL {acl.name}: Comware ACLs need a number, skipped")
                continue
            header = f"acl number {acl.number}"
            if acl.name:
                header += f" name {acl.name}"
            ctx.add(
                lines,
                f"{header} match-order {acl.match_order}",
                f"Creates ACL {acl.number}, matching rules in {acl.match_order} order.",
            )
            if acl.description:
                lines.append(f" description {acl.description}")
            if acl.step.isdigit():
                lines.append(f" step {acl.step}")
            for rule in acl.rules:
                ctx.add(lines, _comware_rule(ctx, acl, rule, huawei=False), describe_rule(acl, rule))
                if rule.description and rule.rule_id:
                    lines.append(f" rule {rule.rule_id} comment {rule.description}")
            lines.append("quit")
        return lines
