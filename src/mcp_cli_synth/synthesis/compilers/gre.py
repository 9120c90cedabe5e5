"""GRE tunnels."""
from ..resolver import connected_port_names
from ..schema import Feature, GREConfig, GRETunnel
from .base import CompileContext, FeatureCompiler


class GRECompiler(FeatureCompiler):
    feature = Feature.GRE
    summary = "GRE tunnels"

    def _source(self, ctx: CompileContext, tunnel: GRETunnel) -> str:
        """Tunnel source, defaulting to the first wired port when unset."""
        if tunnel.source_value:
            return tunnel.source_value
        ports = connected_port_names(ctx.device, ctx.connections)
        if ports:
            ctx.note(f"Tunnel{tunnel.tunnel_number}: no source set, using connected port {ports[0]}")
            return ports[0]
        ctx.note(f"Tunnel{tunnel.tunnel_number}: no source set and no connected port, source omitted")
        return ""

    def _tunnels(self, block: GREConfig) -> list[GRETunnel]:
        return [t for t in block.tunnels if t.tunnel_number]

    def emit_cisco(self, ctx: CompileContext, block: GREConfig) -> list[str]:
        lines: list[str] = []
        for tunnel in self._tunnels(block):
            body = []
            if tunnel.description:
                body.append(f" description {tunnel.description}")
            if tunnel.ip_address and tunnel.mask:
                body.append(f" ip address {tunnel.ip_address} {tunnel.mask}")
            if tunnel.mtu:
                body.append(f" ip mtu {tunnel.mtu}")
            source = self._source(ctx, tunnel)
            if source:
                body.append(f" tunnel source {source}")
            if tunnel.destination_address:
                body.append(f" tunnel destination {tunnel.destination_address}")
            if tunnel.gre_key:
                body.append(f" tunnel key {tunnel.gre_key}")
            if tunnel.gre_checksum:
                body.append(" tunnel checksum")
            if tunnel.keepalive_enabled:
                keepalive = " keepalive"
                if tunnel.keepalive_period:
                    keepalive += f" {tunnel.keepalive_period}"
                    if tunnel.keepalive_retry_times:
                        keepalive += f" {tunnel.keepalive_retry_times}"
                body.append(keepalive)
            lines += ctx.interface(f"Tunnel{tunnel.tunnel_number}", body, shutdown_toggle=True)
        return lines

    def emit_huawei(self, ctx: CompileContext, block: GREConfig) -> list[str]:
        lines: list[str] = []
        for tunnel in self._tunnels(block):
            name = f"Tunnel{tunnel.tunnel_number}"
            body = []
            if tunnel.description:
                body.append(f" description {tunnel.description}")
            if tunnel.ip_address and tunnel.mask:
                body.append(f" ip address {tunnel.ip_address} {tunnel.mask}")
            body.append(" tunnel-protocol gre")
            source = self._source(ctx, tunnel)
            if source:
                body.append(f" source {source}")
            if tunnel.destination_address:
                body.append(f" destination {tunnel.destination_address}")
            if tunnel.mtu:
                body.append(f" mtu {tunnel.mtu}")
            if tunnel.gre_key:
                body.append(f" gre key {tunnel.gre_key}")
            if tunnel.keepalive_enabled:
                keepalive = " keepalive"
                if tunnel.keepalive_period:
                    keepalive += f" period {tunnel.keepalive_period}"
                if tunnel.keepalive_retry_times:
                    keepalive += f" retry-times {tunnel.keepalive_retry_times}"
                body.append(keepalive)
            lines += ctx.interface(name, body)
            if tunnel.security_zone and ctx.is_firewall:
                lines += [f"firewall zone {tunnel.security_zone}", f" add interface {name}", "quit"]
        return lines

    def emit_h3c(self, ctx: CompileContext, block: GREConfig) -> list[str]:
        lines: list[str] = []
        for tunnel in self._tunnels(block):
            name = f"Tunnel{tunnel.tunnel_number}"
            lines.append(f"interface {name} mode gre")
            if tunnel.description:
                lines.append(f" description {tunnel.description}")
            if tunnel.ip_address and tunnel.mask:
                lines.append(f" ip address {tunnel.ip_address} {tunnel.mask}")
            source = self._source(ctx, tunnel)
            if source:
                lines.append(f" source {source}")
            if tunnel.destination_address:
                lines.append(f" destination {tunnel.destination_address}")
            if tunnel.mtu:
                lines.append(f" mtu {tunnel.mtu}")
            if tunnel.gre_key:
                lines.append(f" gre key {tunnel.gre_key}")
            if tunnel.gre_checksum:
                lines.append(" gre checksum")
            if tunnel.df_bit_enable:
                lines.append(" tunnel dfbit enable")
            if tunnel.keepalive_enabled:
                keepalive = " keepalive"
                if tunnel.keepalive_period:
                    keepalive += f" {tunnel.keepalive_period}"
                    if tunnel.keepalive_retry_times:
                        keepalive += f" {tunnel.keepalive_retry_times}"
                lines.append(keepalive)
            lines.append("quit")
            if tunnel.security_zone and ctx.is_firewall:
                lines += [f"security-zone name {tunnel.security_zone}", f" import interface {name}", "quit"]
        return lines
