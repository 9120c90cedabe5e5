"""Security zones and inter-zone security policies."""
from typing import Optional

from ..resolver import address_object_exists, find_service_group, find_time_range, prefix_length
from ..schema import Feature, SecurityConfig, SecurityPolicy, Vendor
from .base import CompileContext, FeatureCompiler


def custom_address(value: str, vendor_key: str) -> str:
    """Render a literal address, range or subnet in the vendor's policy syntax."""
    text = value.strip()
    if "-" in text:
        start, _, end = text.partition("-")
        return f"range {start.strip()} {end.strip()}"
    if "/" in text or " " in text:
        address, _, mask = text.replace("/", " ", 1).partition(" ")
        mask = mask.strip()
        return f"subnet {address} {mask}" if vendor_key == "h3c" else f"{address} {prefix_length(mask)}"
    return f"host {text}" if vendor_key == "h3c" else f"{text} 32"


def _zone_text(name: str, interfaces: tuple[str, ...]) -> str:
    members = [i for i in interfaces if i]
    if not members:
        return f"Creates security zone '{name}'."
    return f"Creates security zone '{name}' containing {', '.join(members)}."


class SecurityCompiler(FeatureCompiler):
    feature = Feature.SECURITY
    vendors = frozenset({Vendor.HUAWEI, Vendor.H3C})
    summary = "Security zones and policies"

    def _address_clause(
        self, ctx: CompileContext, policy: SecurityPolicy, direction: str
    ) -> Optional[str]:
        kind = getattr(policy, f"{direction}_address_type")
        value = getattr(policy, f"{direction}_address_value")
        if kind == "any" or not value:
            return None
        huawei = ctx.dialect.key == "huawei"
        if kind == "group":
            if not address_object_exists(ctx.config, value):
                ctx.note(f"policy {policy.name}: {direction} address group '{value}' not found, match omitted")
                return None
            if huawei:
                return f"  {direction}-address address-set {value}"
            return f"  {direction}-ip object-group-name {value}"
        if huawei:
            return f"  {direction}-address {custom_address(value, 'huawei')}"
        return f"  {direction}-ip-{custom_address(value, 'h3c')}"

    def _service_clause(self, ctx: CompileContext, policy: SecurityPolicy) -> Optional[str]:
        if policy.service_type == "any" or not policy.service_value:
            return None
        if policy.service_type == "group":
            if find_service_group(ctx.config, policy.service_value) is None:
                ctx.note(f"policy {policy.name}: service group '{policy.service_value}' not found, match omitted")
                return None
            if ctx.dialect.key == "huawei":
                return f"  service service-set {policy.service_value}"
            return f"  service object-group-name {policy.service_value}"
        return f"  service {policy.service_value}"

    def _policy(self, ctx: CompileContext, policy: SecurityPolicy) -> list[str]:
        lines: list[str] = []
        verb = "Permits" if policy.action == "permit" else "Blocks"
        ctx.add(
            lines,
            f" rule name {policy.name}",
            f"Policy '{policy.name}': {verb} traffic from zone {policy.source_zone or 'any'} "
            f"to zone {policy.destination_zone or 'any'}.",
        )
        if policy.description:
            lines.append(f'  description "{policy.description}"')
        if policy.source_zone:
            lines.append(f"  source-zone {policy.source_zone}")
        if policy.destination_zone:
            lines.append(f"  destination-zone {policy.destination_zone}")
        for clause in (
            self._address_clause(ctx, policy, "source"),
            self._address_clause(ctx, policy, "destination"),
            self._service_clause(ctx, policy),
        ):
            if clause:
                lines.append(clause)
        if policy.time_range:
            if find_time_range(ctx.config, policy.time_range) is None:
                ctx.note(f"policy {policy.name}: time range '{policy.time_range}' is not defined, clause omitted")
            else:
                lines.append(f"  time-range {policy.time_range}")
        return lines

    def emit_huawei(self, ctx: CompileContext, block: SecurityConfig) -> list[str]:
        lines: list[str] = []
        if block.zones_enabled:
            for zone in block.zones:
                if not zone.name:
                    continue
                ctx.add(lines, f"firewall zone name {zone.name}", _zone_text(zone.name, zone.interfaces))
                if zone.priority:
                    lines.append(f" set priority {zone.priority}")
                if zone.description:
                    lines.append(f' description "{zone.description}"')
                lines += [f" add interface {name}" for name in zone.interfaces if name]
                lines.append("quit")

        policies = [p for p in block.policies if p.enabled and p.name] if block.policies_enabled else []
        if policies:
            ctx.add(lines, "security-policy", "Enters the security policy view; rules are matched top down.")
            for policy in policies:
                lines += self._policy(ctx, policy)
                lines.append(f"  action {policy.action}")
            lines.append("quit")
        return lines

    def emit_h3c(self, ctx: CompileContext, block: SecurityConfig) -> list[str]:
        lines: list[str] = []
        if block.zones_enabled:
            for zone in block.zones:
                if not zone.name:
                    continue
                ctx.add(lines, f"security-zone name {zone.name}", _zone_text(zone.name, zone.interfaces))
                if zone.description:
                    lines.append(f' description "{zone.description}"')
                lines += [f" import interface {name}" for name in zone.interfaces if name]
                lines.append("quit")

        if block.policies_enabled:
            ctx.add(lines, "undo security-policy disable", "Turns on security policy enforcement.")
            policies = [p for p in block.policies if p.enabled and p.name]
            if policies:
                ctx.add(lines, "security-policy ip", "Enters the IPv4 security policy view; rules are matched top down.")
                for policy in policies:
                    lines += self._policy(ctx, policy)
                    if policy.logging:
                        lines.append("  logging enable")
                    if policy.counting:
                        lines.append("  counting enable")
                    lines.append(f"  action {'pass' if policy.action == 'permit' else 'drop'}")
                lines.append("quit")
        return lines
