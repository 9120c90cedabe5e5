"""Port isolation groups."""
from ..resolver import vlan_list_for
from ..schema import Feature, PortIsolationConfig
from .base import CompileContext, FeatureCompiler


class PortIsolationCompiler(FeatureCompiler):
    feature = Feature.PORT_ISOLATION
    summary = "Port isolation"

    def emit_cisco(self, ctx: CompileContext, block: PortIsolationConfig) -> list[str]:
        # IOS has a single isolation domain: protected ports never talk to each other
        if len(block.groups) > 1:
            ctx.note("IOS protected ports form one isolation domain, groups are merged")
        lines: list[str] = []
        seen: set[str] = set()
        for group in block.groups:
            for name in group.interfaces:
                if name and name not in seen:
                    seen.add(name)
                    lines += ctx.interface(name, [" switchport protected"])
        return lines

    def emit_huawei(self, ctx: CompileContext, block: PortIsolationConfig) -> list[str]:
        lines: list[str] = []
        if block.mode == "all":
            lines.append("port-isolate mode all")
        if block.excluded_vlans:
            lines.append(f"port-isolate exclude vlan {vlan_list_for(ctx.dialect, block.excluded_vlans)}")
        for group in block.groups:
            if not group.group_id:
                continue
            for name in group.interfaces:
                if name:
                    lines += ctx.interface(name, [f" port-isolate enable group {group.group_id}"])
        return lines

    def emit_h3c(self, ctx: CompileContext, block: PortIsolationConfig) -> list[str]:
        lines: list[str] = []
        groups = [g for g in block.groups if g.group_id]
        for group in groups:
            lines.append(f"port-isolate group {group.group_id}")
            if group.community_vlans:
                lines.append(f" community-vlan vlan {vlan_list_for(ctx.dialect, group.community_vlans)}")
            lines.append("quit")
        for group in groups:
            for name in group.interfaces:
                if name:
                    lines += ctx.interface(name, [f" port-isolate enable group {group.group_id}"])
        return lines
