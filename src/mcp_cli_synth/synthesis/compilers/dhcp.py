"""DHCP server pools."""
from ..resolver import format_mac_dotted, format_mac_hyphen, ip_to_hex
from ..schema import DHCPConfig, DHCPPool, Feature
from .base import CompileContext, FeatureCompiler


def _to_int(value: str) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def lease_components(pool: DHCPPool) -> tuple[int, int, int, int]:
    """Lease as (days, hours, minutes, seconds) parsed from the pool fields."""
    return (
        _to_int(pool.lease_days),
        _to_int(pool.lease_hours),
        _to_int(pool.lease_minutes),
        _to_int(pool.lease_seconds),
    )


def lease_to_minutes(days: int, hours: int, minutes: int, seconds: int) -> tuple[int, int, int]:
    """Fold seconds into minute precision, rounding up so the lease never shrinks.

    Returns (days, hours, minutes) normalized so hours < 24 and minutes < 60.
    """
    total = ((days * 24 + hours) * 60 + minutes) * 60 + seconds
    total_minutes = -(-total // 60)
    total_hours, minutes = divmod(total_minutes, 60)
    days, hours = divmod(total_hours, 24)
    return days, hours, minutes


def _lease_text(days: int, hours: int, minutes: int, seconds: int = 0) -> str:
    text = f"{days}d {hours}h {minutes}m"
    return f"{text} {seconds}s" if seconds else text


class DHCPCompiler(FeatureCompiler):
    feature = Feature.DHCP
    summary = "DHCP server pools"

    def _common(self, ctx: CompileContext, lines: list[str], pool: DHCPPool, gateway: str, dns: str) -> None:
        if pool.gateway:
            ctx.add(lines, gateway.format(pool.gateway), f"Hands out {pool.gateway} as the default gateway.")
        if pool.dns_server:
            ctx.add(lines, dns.format(pool.dns_server), f"Hands out {pool.dns_server} as the DNS server.")

    def _network(self, ctx: CompileContext, lines: list[str], pool: DHCPPool, template: str) -> None:
        if pool.network and pool.subnet_mask:
            ctx.add(
                lines,
                template.format(pool.network, pool.subnet_mask),
                f"Leases addresses from {pool.network}/{pool.subnet_mask}.",
            )

    def emit_cisco(self, ctx: CompileContext, block: DHCPConfig) -> list[str]:
        pools = [p for p in block.pools if p.pool_name]
        lines: list[str] = []
        ctx.add(lines, "service dhcp", "Enables the DHCP server.")
        for pool in pools:
            if pool.exclude_start and pool.exclude_end:
                ctx.add(
                    lines,
                    f"ip dhcp excluded-address {pool.exclude_start} {pool.exclude_end}",
                    f"Keeps {pool.exclude_start}-{pool.exclude_end} out of pool {pool.pool_name}.",
                )

        for pool in pools:
            ctx.add(lines, f"ip dhcp pool {pool.pool_name}", f"Creates pool '{pool.pool_name}'.")
            self._network(ctx, lines, pool, " network {} {}")
            self._common(ctx, lines, pool, " default-router {}", " dns-server {}")
            if pool.option43:
                hex_ip = ip_to_hex(pool.option43)
                if hex_ip:
                    ctx.add(lines, f" option 43 hex f104{hex_ip}", f"Points access points at controller {pool.option43}.")
                else:
                    ctx.note(f"pool {pool.pool_name}: option 43 '{pool.option43}' is not an IPv4 address, skipped")
            lease = lease_components(pool)
            if any(lease):
                days, hours, minutes = lease_to_minutes(*lease)
                ctx.add(lines, f" lease {days} {hours} {minutes}", f"Sets the lease to {_lease_text(days, hours, minutes)}.")
                if lease[3]:
                    ctx.note(f"pool {pool.pool_name}: IOS leases have minute precision, seconds rounded up")
            lines.append("exit")

            for binding in pool.static_bindings:
                if not (binding.ip_address and binding.mac_address):
                    continue
                mac = format_mac_dotted(binding.mac_address).replace(".", "")
                client_id = "01" + mac
                client_id = ".".join(client_id[i:i + 4] for i in range(0, len(client_id), 4))
                ctx.add(
                    lines,
                    f"ip dhcp pool STATIC_{mac}",
                    f"Reserves {binding.ip_address} for {binding.mac_address} in its own host pool.",
                )
                lines += [
                    f" host {binding.ip_address} {pool.subnet_mask}".rstrip(),
                    f" client-identifier {client_id}",
                    "exit",
                ]
        return lines

    def emit_huawei(self, ctx: CompileContext, block: DHCPConfig) -> list[str]:
        lines: list[str] = []
        ctx.add(lines, "dhcp enable", "Enables the DHCP service globally.")
        for pool in block.pools:
            if not pool.pool_name:
                continue
            ctx.add(lines, f"ip pool {pool.pool_name}", f"Creates global address pool '{pool.pool_name}'.")
            if pool.gateway:
                ctx.add(lines, f" gateway-list {pool.gateway}", f"Hands out {pool.gateway} as the default gateway.")
            self._network(ctx, lines, pool, " network {} mask {}")
            if pool.dns_server:
                ctx.add(lines, f" dns-list {pool.dns_server}", f"Hands out {pool.dns_server} as the DNS server.")
            if pool.option43:
                ctx.add(
                    lines,
                    f" option 43 sub-option 3 ascii {pool.option43}",
                    f"Points access points at controller {pool.option43}.",
                )
            if pool.exclude_start and pool.exclude_end:
                ctx.add(
                    lines,
                    f" excluded-ip-address {pool.exclude_start} {pool.exclude_end}",
                    f"Never leases {pool.exclude_start}-{pool.exclude_end}.",
                )
            lease = lease_components(pool)
            if any(lease):
                days, hours, minutes = lease_to_minutes(*lease)
                ctx.add(
                    lines,
                    f" lease day {days} hour {hours} minute {minutes}",
                    f"Sets the lease to {_lease_text(days, hours, minutes)}.",
                )
                if lease[3]:
                    ctx.note(f"pool {pool.pool_name}: VRP leases have minute precision, seconds rounded up")
            for binding in pool.static_bindings:
                if binding.ip_address and binding.mac_address:
                    ctx.add(
                        lines,
                        f" static-bind ip-address {binding.ip_address} "
                        f"mac-address {format_mac_hyphen(binding.mac_address)}",
                        f"Reserves {binding.ip_address} for {binding.mac_address}.",
                    )
            lines.append("quit")
        return lines

    def emit_h3c(self, ctx: CompileContext, block: DHCPConfig) -> list[str]:
        lines: list[str] = []
        ctx.add(lines, "dhcp enable", "Enables the DHCP service globally.")
        for pool in block.pools:
            if not pool.pool_name:
                continue
            ctx.add(lines, f"dhcp server ip-pool {pool.pool_name}", f"Creates address pool '{pool.pool_name}'.")
            self._network(ctx, lines, pool, " network {} mask {}")
            self._common(ctx, lines, pool, " gateway-list {}", " dns-list {}")
            if pool.option43:
                hex_ip = ip_to_hex(pool.option43)
                if hex_ip:
                    ctx.add(
                        lines,
                        f" option 43 hex 8007000001{hex_ip}",
                        f"Points access points at controller {pool.option43}.",
                    )
                else:
                    ctx.note(f"pool {pool.pool_name}: option 43 '{pool.option43}' is not an IPv4 address, skipped")
            if pool.exclude_start and pool.exclude_end:
                ctx.add(
                    lines,
                    f" forbidden-ip {pool.exclude_start} {pool.exclude_end}",
                    f"Never leases {pool.exclude_start}-{pool.exclude_end}.",
                )
            days, hours, minutes, seconds = lease_components(pool)
            if any((days, hours, minutes, seconds)):
                ctx.add(
                    lines,
                    f" expired day {days} hour {hours} minute {minutes} second {seconds}",
                    f"Sets the lease to {_lease_text(days, hours, minutes, seconds)}.",
                )
            for binding in pool.static_bindings:
                if binding.ip_address and binding.mac_address:
                    ctx.add(
                        lines,
                        f" static-bind ip-address {binding.ip_address} mask {pool.subnet_mask} "
                        f"hardware-address {format_mac_hyphen(binding.mac_address)}",
                        f"Reserves {binding.ip_address} for {binding.mac_address}.",
                    )
            lines.append("quit")
        return lines
