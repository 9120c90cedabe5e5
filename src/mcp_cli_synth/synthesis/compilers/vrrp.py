"""VRRP groups on routed and VLAN interfaces."""
from ..resolver import resolve_interface
from ..schema import Feature, VRRPConfig, VRRPGroup
from .base import CompileContext, FeatureCompiler


class VRRPCompiler(FeatureCompiler):
    feature = Feature.VRRP
    summary = "VRRP"

    def _cisco_group(self, group: VRRPGroup) -> list[str]:
        prefix = f" vrrp {group.group_id}"
        lines = [f"{prefix} ip {group.virtual_ip}"]
        if group.priority:
            lines.append(f"{prefix} priority {group.priority}")
        if group.preempt:
            if group.preempt_delay and group.preempt_delay != "0":
                lines.append(f"{prefix} preempt delay minimum {group.preempt_delay}")
            else:
                lines.append(f"{prefix} preempt")
        else:
            lines.append(f" no{prefix} preempt")
        if group.advertisement_interval:
            lines.append(f"{prefix} timers advertise {group.advertisement_interval}")
        if group.auth_key and group.auth_type == "simple":
            lines.append(f"{prefix} authentication text {group.auth_key}")
        elif group.auth_key and group.auth_type == "md5":
            lines.append(f"{prefix} authentication md5 key-string {group.auth_key}")
        if group.description:
            lines.append(f"{prefix} description {group.description}")
        return lines

    def _comware_group(self, group: VRRPGroup, huawei: bool) -> list[str]:
        prefix = f" vrrp vrid {group.group_id}"
        lines = [f"{prefix} virtual-ip {group.virtual_ip}"]
        if group.priority:
            lines.append(f"{prefix} priority {group.priority}")
        if group.preempt:
            delay = group.preempt_delay or "0"
            timer = "timer delay" if huawei else "delay"
            lines.append(f"{prefix} preempt-mode {timer} {delay}")
        else:
            lines.append(f" undo{prefix} preempt-mode")
        if group.advertisement_interval:
            lines.append(f"{prefix} timer advertise {group.advertisement_interval}")
        if group.auth_key and group.auth_type == "simple":
            lines.append(f"{prefix} authentication-mode simple plain {group.auth_key}")
        elif group.auth_key and group.auth_type == "md5":
            lines.append(f"{prefix} authentication-mode md5 {group.auth_key}")
        if group.description:
            lines.append(f"{prefix} description {group.description}")
        return lines

    def _emit(self, ctx: CompileContext, block: VRRPConfig) -> list[str]:
        key = ctx.dialect.key
        lines: list[str] = []
        for iface in block.interfaces:
            name = resolve_interface(ctx.dialect, iface.interface_name, iface.vlan_id)
            groups = [g for g in iface.groups if g.group_id and g.virtual_ip]
            if not (name and groups):
                continue
            body: list[str] = []
            for group in groups:
                if key == "cisco":
                    body += self._cisco_group(group)
                else:
                    body += self._comware_group(group, huawei=key == "huawei")
            lines += ctx.interface(name, body, shutdown_toggle=True)
        return lines

    emit_cisco = _emit
    emit_huawei = _emit
    emit_h3c = _emit
