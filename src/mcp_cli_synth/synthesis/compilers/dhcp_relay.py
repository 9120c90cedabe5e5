"""DHCP relay agents."""
from ..schema import DHCPOption82, DHCPRelayConfig, Feature
from .base import CompileContext, FeatureCompiler


def _circuit_id(opt82: DHCPOption82) -> str:
    cmd = " dhcp relay information circuit-id"
    if opt82.circuit_id_format == "string" and opt82.circuit_id_string:
        return f"{cmd} string {opt82.circuit_id_string}"
    if opt82.circuit_id_format in ("normal", "verbose"):
        return f"{cmd} {opt82.circuit_id_format}"
    return cmd


def _remote_id(opt82: DHCPOption82) -> str:
    cmd = " dhcp relay information remote-id"
    if opt82.remote_id_format == "string" and opt82.remote_id_string:
        return f"{cmd} string {opt82.remote_id_string}"
    if opt82.remote_id_format in ("normal", "sysname"):
        return f"{cmd} {opt82.remote_id_format}"
    return cmd


class DHCPRelayCompiler(FeatureCompiler):
    feature = Feature.DHCP_RELAY
    summary = "DHCP relay"

    def emit_cisco(self, ctx: CompileContext, block: DHCPRelayConfig) -> list[str]:
        lines = ["service dhcp"]
        if any(i.option82.enabled for i in block.interfaces):
            lines.append("ip dhcp relay information option")
        for iface in block.interfaces:
            if not iface.interface_name:
                continue
            servers = [s for s in iface.server_addresses if s.ip]
            if not servers:
                ctx.note(f"{iface.interface_name}: no relay server address, interface skipped")
                continue
            body = []
            for server in servers:
                if server.vpn_instance:
                    body.append(f" ip helper-address vrf {server.vpn_instance} {server.ip}")
                else:
                    body.append(f" ip helper-address {server.ip}")
            lines += ctx.interface(iface.interface_name, body)
        return lines

    def emit_huawei(self, ctx: CompileContext, block: DHCPRelayConfig) -> list[str]:
        lines = ["dhcp enable"]
        if not block.server_match_check:
            lines.append("undo dhcp relay request server-match enable")
        if block.reply_forward_all:
            lines.append("dhcp relay reply forward all enable")
        if not block.trust_option82:
            lines.append("undo dhcp relay trust option82")

        for iface in block.interfaces:
            if not iface.interface_name:
                continue
            opts = iface.huawei
            body = [" dhcp select relay"]
            if opts.source_ip_address:
                body.append(f" dhcp relay source-ip-address {opts.source_ip_address}")
            if opts.gateway:
                body.append(f" dhcp relay gateway {opts.gateway}")
            for server in iface.server_addresses:
                if not server.ip:
                    continue
                cmd = f" dhcp relay server-ip {server.ip}"
                if server.vpn_instance:
                    cmd += f" vpn-instance {server.vpn_instance}"
                body.append(cmd)
            if opts.option82_enabled:
                body.append(" dhcp relay information enable")
                if opts.option82_strategy != "replace":
                    body.append(f" dhcp relay information strategy {opts.option82_strategy}")
            if opts.insert_vss_control:
                body.append(" dhcp option82 vss-control insert enable")
            if opts.insert_link_selection:
                body.append(" dhcp option82 link-selection insert enable")
            if opts.insert_server_id_override:
                body.append(" dhcp option82 server-id-override insert enable")
            lines += ctx.interface(iface.interface_name, body)
        return lines

    def emit_h3c(self, ctx: CompileContext, block: DHCPRelayConfig) -> list[str]:
        security = block.security
        lines = ["dhcp enable"]
        if security.client_info_recording:
            lines.append("dhcp relay client-information record")
        if security.client_info_refresh:
            lines.append("dhcp relay client-information refresh enable")
            if security.client_info_refresh_type == "interval" and security.client_info_refresh_interval:
                lines.append(
                    f"dhcp relay client-information refresh interval {security.client_info_refresh_interval}"
                )
            elif security.client_info_refresh_type == "auto":
                lines.append("dhcp relay client-information refresh auto")
        if security.mac_check and security.mac_check_aging_time:
            lines.append(f"dhcp relay check mac-address aging-time {security.mac_check_aging_time}")
        # 56 is the device default
        if block.dscp and block.dscp != "56":
            lines.append(f"dhcp dscp {block.dscp}")

        for iface in block.interfaces:
            if not iface.interface_name:
                continue
            body = [" dhcp select relay"]
            body += [f" dhcp relay server-address {s.ip}" for s in iface.server_addresses if s.ip]
            if security.mac_check:
                body.append(" dhcp relay check mac-address")
            opt82 = iface.option82
            if opt82.enabled:
                body += [
                    " dhcp relay information enable",
                    f" dhcp relay information strategy {opt82.strategy}",
                    _circuit_id(opt82),
                    _remote_id(opt82),
                ]
            lines += ctx.interface(iface.interface_name, body)
        return lines
