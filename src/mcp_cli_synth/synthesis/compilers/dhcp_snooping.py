"""DHCP snooping."""
from ..resolver import format_vlan_ranges, parse_vlan_list
from ..schema import DHCPSnoopingConfig, Feature
from .base import CompileContext, FeatureCompiler


class DHCPSnoopingCompiler(FeatureCompiler):
    feature = Feature.DHCP_SNOOPING
    summary = "DHCP snooping"

    def emit_cisco(self, ctx: CompileContext, block: DHCPSnoopingConfig) -> list[str]:
        lines = ["ip dhcp snooping"]
        vlans = parse_vlan_list(block.enabled_on_vlans)
        if vlans:
            lines.append(f"ip dhcp snooping vlan {format_vlan_ranges(vlans, 'dash')}")
        else:
            ctx.note("no VLANs listed, snooping is enabled globally but inspects no VLAN")
        if block.binding_database_enabled and block.binding_database_filename:
            lines.append(f"ip dhcp snooping database {block.binding_database_filename}")
            if block.binding_database_interval:
                lines.append(f"ip dhcp snooping database write-delay {block.binding_database_interval}")
        for iface in block.interfaces:
            if iface.interface_name and iface.trust:
                lines += ctx.interface(iface.interface_name, [" ip dhcp snooping trust"])
        return lines

    def emit_huawei(self, ctx: CompileContext, block: DHCPSnoopingConfig) -> list[str]:
        lines = ["dhcp enable", "dhcp snooping enable"]
        vlans = parse_vlan_list(block.enabled_on_vlans)
        if vlans:
            lines.append(f"dhcp snooping enable vlan {format_vlan_ranges(vlans, 'to')}")
        if block.binding_database_enabled and block.binding_database_filename:
            cmd = f"dhcp snooping user-bind autosave {block.binding_database_filename}"
            # 3600 is the device default
            if block.binding_database_interval and block.binding_database_interval != "3600":
                cmd += f" write-delay {block.binding_database_interval}"
            lines.append(cmd)
        for iface in block.interfaces:
            if iface.interface_name and iface.trust:
                lines += ctx.interface(iface.interface_name, [" dhcp snooping trusted"])
        return lines

    def emit_h3c(self, ctx: CompileContext, block: DHCPSnoopingConfig) -> list[str]:
        lines = ["dhcp snooping enable"]
        if block.binding_database_enabled:
            if block.binding_database_filename:
                lines.append(f"dhcp snooping binding database filename {block.binding_database_filename}")
            if block.binding_database_interval:
                lines.append(f"dhcp snooping binding database update interval {block.binding_database_interval}")
        for iface in block.interfaces:
            if not iface.interface_name or not (iface.trust or iface.binding_record):
                continue
            body = []
            if iface.trust:
                body.append(" dhcp snooping trust")
            if iface.binding_record:
                body.append(" dhcp snooping binding record")
            lines += ctx.interface(iface.interface_name, body)
        return lines
