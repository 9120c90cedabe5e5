"""Static routes and OSPF."""
from ..resolver import resolve_interface
from ..schema import Feature, OSPFArea, RoutingConfig
from .base import CompileContext, FeatureCompiler


def _stub_flags(area: OSPFArea) -> str:
    """"stub", "nssa no-summary" and the like; empty for backbone and standard areas."""
    if area.area_id in ("0", "0.0.0.0") or area.area_type not in ("stub", "nssa"):
        return ""
    return f"{area.area_type}{' no-summary' if area.no_summary else ''}"


class RoutingCompiler(FeatureCompiler):
    feature = Feature.ROUTING
    summary = "Routing"

    def _static_routes(self, ctx: CompileContext, block: RoutingConfig) -> list[str]:
        cisco = ctx.dialect.key == "cisco"
        lines = []
        for route in block.static_routes:
            if not (route.network and route.subnet_mask and route.next_hop):
                continue
            if cisco:
                line = f"ip route {route.network} {route.subnet_mask} {route.next_hop}"
                if route.admin_distance:
                    line += f" {route.admin_distance}"
            else:
                line = f"ip route-static {route.network} {route.subnet_mask} {route.next_hop}"
                if route.admin_distance:
                    line += f" preference {route.admin_distance}"
            lines.append(line)
        return lines

    def _ospf_interfaces(self, ctx: CompileContext, block: RoutingConfig) -> list[str]:
        lines = []
        for iface in block.ospf.interface_configs:
            name = resolve_interface(ctx.dialect, iface.interface_name, iface.vlan_id)
            if not (name and iface.priority):
                continue
            if ctx.dialect.key == "cisco":
                body = [f" ip ospf priority {iface.priority}"]
            else:
                body = [f" ospf dr-priority {iface.priority}"]
            lines += ctx.interface(name, body)
        return lines

    def emit_cisco(self, ctx: CompileContext, block: RoutingConfig) -> list[str]:
        lines = self._static_routes(ctx, block)
        ospf = block.ospf
        if not ospf.enabled:
            return lines

        lines.append(f"router ospf {ospf.process_id or '1'}")
        if ospf.router_id:
            lines.append(f" router-id {ospf.router_id}")
        for area in ospf.areas:
            if not area.area_id:
                continue
            for net in area.networks:
                if net.network and net.wildcard_mask:
                    lines.append(f" network {net.network} {net.wildcard_mask} area {area.area_id}")
            flags = _stub_flags(area)
            if flags:
                lines.append(f" area {area.area_id} {flags}")
                if area.default_cost:
                    lines.append(f" area {area.area_id} default-cost {area.default_cost}")
        if ospf.redistribute_static:
            lines.append(" redistribute static subnets")
        if ospf.redistribute_connected:
            lines.append(" redistribute connected subnets")
        if ospf.default_route:
            lines.append(" default-information originate")
        lines.append("exit")
        return lines + self._ospf_interfaces(ctx, block)

    def _emit_comware(self, ctx: CompileContext, block: RoutingConfig) -> list[str]:
        lines = self._static_routes(ctx, block)
        ospf = block.ospf
        if not ospf.enabled:
            return lines

        header = f"ospf {ospf.process_id or '1'}"
        if ospf.router_id:
            header += f" router-id {ospf.router_id}"
        lines.append(header)
        if ospf.redistribute_static:
            lines.append(" import-route static")
        if ospf.redistribute_connected:
            lines.append(" import-route direct")
        if ospf.default_route:
            lines.append(" default-route-advertise")
        for area in ospf.areas:
            if not area.area_id:
                continue
            lines.append(f" area {area.area_id}")
            flags = _stub_flags(area)
            if flags:
                lines.append(f"  {flags}")
                if area.default_cost:
                    lines.append(f"  default-cost {area.default_cost}")
            for net in area.networks:
                if net.network and net.wildcard_mask:
                    lines.append(f"  network {net.network} {net.wildcard_mask}")
            lines.append(" quit")
        lines.append("quit")
        return lines + self._ospf_interfaces(ctx, block)

    emit_huawei = _emit_comware
    emit_h3c = _emit_comware
