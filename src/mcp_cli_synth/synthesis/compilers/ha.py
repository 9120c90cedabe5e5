"""Firewall hot standby: Comware remote-backup groups and VRP HRP."""
from ..schema import Feature, HAConfig, Vendor
from .base import CompileContext, FeatureCompiler


class HACompiler(FeatureCompiler):
    feature = Feature.HA
    vendors = frozenset({Vendor.HUAWEI, Vendor.H3C})
    summary = "High availability"

    def emit_h3c(self, ctx: CompileContext, block: HAConfig) -> list[str]:
        tracks = [t for t in block.track_items if t.track_id and t.value and t.type == "interface"]
        lines: list[str] = []
        for item in tracks:
            lines += [f"track {item.track_id} interface {item.value}", "quit"]

        lines += ["remote-backup group", f" device-role {block.device_role}"]
        lines.append(" backup-mode dual-active" if block.work_mode == "dual-active" else " undo backup-mode")
        if block.local_ip and block.remote_ip:
            lines.append(f" local-ip {block.local_ip}")
            lines.append(f" remote-ip {block.remote_ip} port {block.port or '1026'}")
        elif block.local_ip or block.remote_ip:
            ctx.note("control channel needs both local and remote addresses, omitted")
        if block.keepalive_interval and block.keepalive_interval != "1":
            lines.append(f" keepalive interval {block.keepalive_interval}")
        if block.keepalive_count and block.keepalive_count != "10":
            lines.append(f" keepalive count {block.keepalive_count}")
        if block.data_channel_interface:
            lines.append(f" data-channel interface {block.data_channel_interface}")
        lines.append(" hot-backup enable" if block.hot_backup_enabled else " undo hot-backup enable")
        lines.append(
            " configuration auto-sync enable" if block.auto_sync_enabled
            else " undo configuration auto-sync enable"
        )
        lines.append(" configuration sync-check" if block.sync_check_enabled else " undo configuration sync-check")
        if block.failback_enabled:
            lines.append(f" delay-time {block.failback_delay or '30'}")
        lines += [f" track {item.track_id}" for item in tracks]
        lines.append("quit")
        return lines

    def emit_huawei(self, ctx: CompileContext, block: HAConfig) -> list[str]:
        lines = [f"hrp track {item.type} {item.value}" for item in block.track_items if item.value]
        for hb in block.heartbeat_interfaces:
            if hb.interface_name and hb.remote_ip:
                line = f"hrp interface {hb.interface_name} remote {hb.remote_ip}"
                if hb.heartbeat_only:
                    line += " heartbeat-only"
                lines.append(line)
        if not block.heartbeat_interfaces and block.data_channel_interface and block.remote_ip:
            lines.append(f"hrp interface {block.data_channel_interface} remote {block.remote_ip}")

        if block.authentication_key:
            lines.append(f"hrp authentication-key {block.authentication_key}")
        if block.checksum_enabled:
            lines.append("hrp checksum enable")
        if not block.encryption_enabled:
            lines.append("hrp encryption disable")
        if block.hello_interval and block.hello_interval != "1000":
            lines.append(f"hrp timer hello {block.hello_interval}")
        if block.auto_sync_enabled:
            lines.append("hrp auto-sync config")
        if block.work_mode == "dual-active":
            lines.append("hrp mirror session enable")

        if block.failback_enabled:
            lines.append("hrp preempt enable")
            # 60 seconds is the device default
            if block.failback_delay and block.failback_delay != "60":
                lines.append(f"hrp preempt delay {block.failback_delay}")
        else:
            lines.append("undo hrp preempt enable")

        role = "active" if block.device_role == "primary" else "standby"
        lines += [f"hrp device {role}", "hrp enable"]
        return lines
