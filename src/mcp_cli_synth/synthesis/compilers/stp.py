"""Spanning tree."""
from dataclasses import replace

from ..resolver import format_vlan_ranges, parse_vlan_list, vlan_list_for
from ..schema import Feature, STPConfig, STPPortConfig
from .base import CompileContext, FeatureCompiler
from .link_aggregation import bundled_port_names

CISCO_MODES = {"stp": "pvst", "pvst": "pvst", "rstp": "rapid-pvst", "mstp": "mst"}


class STPCompiler(FeatureCompiler):
    feature = Feature.STP
    summary = "Spanning tree"

    def _ports(self, ctx: CompileContext, block: STPConfig) -> list[STPPortConfig]:
        """Port configs with aggregation members folded onto the aggregate interface."""
        lag = ctx.config.link_aggregation
        members = set(bundled_port_names(ctx.device, ctx.connections))
        aggregate = ctx.dialect.aggregate_interface(lag.group_id) if members else ""

        ports: list[STPPortConfig] = []
        seen: set[str] = set()
        for port in block.port_configs:
            name = port.interface_name
            if not name:
                continue
            if name in members:
                ctx.note(f"{name} is bundled into {aggregate}, spanning tree settings applied there")
                name = aggregate
            if name in seen:
                continue
            seen.add(name)
            ports.append(replace(port, interface_name=name))
        return ports

    def emit_cisco(self, ctx: CompileContext, block: STPConfig) -> list[str]:
        mode = CISCO_MODES.get(block.mode, "rapid-pvst")
        lines = [f"spanning-tree mode {mode}"]
        if mode == "mst":
            lines.append("spanning-tree mst configuration")
            if block.region_name:
                lines.append(f" name {block.region_name}")
            if block.revision_level:
                lines.append(f" revision {block.revision_level}")
            for inst in block.mstp_instances:
                vlans = parse_vlan_list(inst.vlan_list)
                if inst.instance_id and vlans:
                    lines.append(f" instance {inst.instance_id} vlan {format_vlan_ranges(vlans, 'dash')}")
            lines.append("exit")
            for inst in block.mstp_instances:
                if not inst.instance_id:
                    continue
                if inst.root_bridge in ("primary", "secondary"):
                    lines.append(f"spanning-tree mst {inst.instance_id} root {inst.root_bridge}")
                elif inst.priority:
                    lines.append(f"spanning-tree mst {inst.instance_id} priority {inst.priority}")
        else:
            if block.root_bridge in ("primary", "secondary"):
                lines.append(f"spanning-tree vlan 1-4094 root {block.root_bridge}")
            elif block.priority:
                lines.append(f"spanning-tree vlan 1-4094 priority {block.priority}")

        for port in self._ports(ctx, block):
            body = []
            if port.port_priority:
                body.append(f" spanning-tree port-priority {port.port_priority}")
            if port.path_cost and port.path_cost != "auto":
                body.append(f" spanning-tree cost {port.path_cost}")
            if port.edge_port:
                body.append(" spanning-tree portfast")
            if port.bpdu_guard:
                body.append(" spanning-tree bpduguard enable")
            if body:
                lines += ctx.interface(port.interface_name, body)
        return lines

    def _emit_comware(self, ctx: CompileContext, block: STPConfig) -> list[str]:
        huawei = ctx.dialect.key == "huawei"
        mode = block.mode
        if huawei and mode == "pvst":
            ctx.note("VRP has no PVST, falling back to rstp")
            mode = "rstp"
        lines = [f"stp mode {mode}"]

        if mode == "mstp":
            lines.append("stp region-configuration")
            if block.region_name:
                lines.append(f" region-name {block.region_name}")
            if block.revision_level:
                lines.append(f" revision-level {block.revision_level}")
            for inst in block.mstp_instances:
                if inst.instance_id and inst.vlan_list:
                    lines.append(f" instance {inst.instance_id} vlan {vlan_list_for(ctx.dialect, inst.vlan_list)}")
            lines += [" active region-configuration", "quit"]
            for inst in block.mstp_instances:
                if not inst.instance_id:
                    continue
                if inst.root_bridge in ("primary", "secondary"):
                    lines.append(f"stp instance {inst.instance_id} root {inst.root_bridge}")
                elif inst.priority:
                    lines.append(f"stp instance {inst.instance_id} priority {inst.priority}")
        else:
            if block.root_bridge in ("primary", "secondary"):
                lines.append(f"stp root {block.root_bridge}")
            elif block.priority:
                lines.append(f"stp priority {block.priority}")

        ports = self._ports(ctx, block)
        # BPDU protection is a global switch on VRP and Comware
        if any(p.bpdu_guard for p in ports):
            lines.append("stp bpdu-protection")
        for port in ports:
            body = []
            if port.port_priority:
                body.append(f" stp port priority {port.port_priority}")
            if port.path_cost and port.path_cost != "auto":
                body.append(f" stp cost {port.path_cost}")
            if port.edge_port:
                body.append(" stp edged-port enable" if huawei else " stp edged-port")
            if body:
                lines += ctx.interface(port.interface_name, body)
        return lines

    emit_huawei = _emit_comware
    emit_h3c = _emit_comware
