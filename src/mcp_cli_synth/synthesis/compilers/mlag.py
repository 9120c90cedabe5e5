"""M-LAG (Comware) and DFS-group M-LAG (VRP)."""
from ..schema import Feature, MLAGConfig, Vendor
from .base import CompileContext, FeatureCompiler

DEFAULT_PRIORITY = "32768"

# Comware asks for confirmation before changing system identity
CONFIRM = "Y"


class MLAGCompiler(FeatureCompiler):
    feature = Feature.MLAG
    vendors = frozenset({Vendor.HUAWEI, Vendor.H3C})
    summary = "M-LAG"

    def emit_h3c(self, ctx: CompileContext, block: MLAGConfig) -> list[str]:
        lines: list[str] = []
        if block.system_mac:
            lines += [f"m-lag system-mac {block.system_mac}", CONFIRM]
        if block.system_number:
            lines += [f"m-lag system-number {block.system_number}", CONFIRM]
        if block.system_priority and block.system_priority != DEFAULT_PRIORITY:
            lines += [f"m-lag system-priority {block.system_priority}", CONFIRM]
        if block.role_priority and block.role_priority != DEFAULT_PRIORITY:
            lines.append(f"m-lag role priority {block.role_priority}")
        if block.standalone_enabled:
            cmd = "m-lag standalone enable"
            if block.standalone_delay:
                cmd += f" delay {block.standalone_delay}"
            lines.append(cmd)

        if block.keepalive_enabled:
            if block.keepalive_destination_ip:
                cmd = f"m-lag keepalive ip destination {block.keepalive_destination_ip}"
                if block.keepalive_source_ip:
                    cmd += f" source {block.keepalive_source_ip}"
                if block.keepalive_udp_port and block.keepalive_udp_port != "6400":
                    cmd += f" udp-port {block.keepalive_udp_port}"
                if block.keepalive_vpn_instance:
                    cmd += f" vpn-instance {block.keepalive_vpn_instance}"
                lines.append(cmd)
            else:
                ctx.note("keepalive enabled without a destination address, keepalive omitted")
            timers = ""
            if block.keepalive_interval and block.keepalive_interval != "1000":
                timers += f" interval {block.keepalive_interval}"
            if block.keepalive_timeout and block.keepalive_timeout != "5":
                timers += f" timeout {block.keepalive_timeout}"
            if timers:
                lines.append(f"m-lag keepalive{timers}")

        if block.mad_default_action and block.mad_default_action != "down":
            lines.append(f"m-lag mad default-action {block.mad_default_action}")

        if block.peer_link_id:
            lines += ctx.interface(
                ctx.dialect.aggregate_interface(block.peer_link_id),
                [f" port m-lag peer-link {block.peer_link_id}"],
            )
        for iface in block.interfaces:
            if iface.aggregate_id and iface.group_id:
                lines += ctx.interface(
                    ctx.dialect.aggregate_interface(iface.aggregate_id),
                    [f" port m-lag group {iface.group_id}"],
                )
        return lines

    def emit_huawei(self, ctx: CompileContext, block: MLAGConfig) -> list[str]:
        group_id = block.dfs_group_id or "1"
        lines = [f"dfs-group {group_id}"]
        if block.dfs_group_priority and block.dfs_group_priority != "100":
            lines.append(f" priority {block.dfs_group_priority}")
        if block.authentication_password:
            lines.append(f" authentication-mode hmac-sha256 password {block.authentication_password}")
        if block.keepalive_source_ip and block.keepalive_destination_ip:
            lines.append(
                f" dual-active detection source ip {block.keepalive_source_ip} "
                f"peer {block.keepalive_destination_ip}"
            )
        lines.append("quit")

        if block.peer_link_id:
            lines += ctx.interface(
                ctx.dialect.aggregate_interface(block.peer_link_id),
                [f" peer-link {block.peer_link_id}", " stp enable"],
            )
        else:
            ctx.note("no peer-link Eth-Trunk set, M-LAG will not form")
        for iface in block.interfaces:
            if not (iface.aggregate_id and iface.group_id):
                continue
            cmd = f" dfs-group {group_id} m-lag {iface.group_id}"
            if iface.mode == "active-standby":
                cmd += " active-standby"
            lines += ctx.interface(ctx.dialect.aggregate_interface(iface.aggregate_id), [cmd])
        return lines
