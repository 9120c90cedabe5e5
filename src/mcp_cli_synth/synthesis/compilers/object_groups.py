"""Firewall address, service and domain object groups."""
from ..schema import (
    AddressGroup,
    AddressMember,
    Feature,
    ObjectGroupConfig,
    ServiceMember,
    Vendor,
)
from .base import CompileContext, FeatureCompiler

HOST_MASKS = ("", "32", "255.255.255.255")


def _service_ports(member: ServiceMember, src_word: str, dst_word: str) -> str:
    clause = ""
    if member.protocol in ("tcp", "udp"):
        if member.source_port_operator and member.source_port1:
            clause += f" {src_word} {member.source_port_operator} {member.source_port1}"
            if member.source_port_operator == "range" and member.source_port2:
                clause += f" {member.source_port2}"
        if member.destination_port_operator and member.destination_port1:
            clause += f" {dst_word} {member.destination_port_operator} {member.destination_port1}"
            if member.destination_port_operator == "range" and member.destination_port2:
                clause += f" {member.destination_port2}"
    elif member.protocol == "icmp" and member.icmp_type:
        clause += f" icmp-type {member.icmp_type}"
        if member.icmp_code:
            clause += f" {member.icmp_code}"
    return clause


def _protocol(member: ServiceMember) -> str:
    if member.protocol == "custom":
        return f" {member.custom_protocol_number}" if member.custom_protocol_number else ""
    return f" {member.protocol}"


def _h3c_address_member(index: int, member: AddressMember) -> str:
    if member.type == "ip-mask" and member.address:
        if member.mask in HOST_MASKS:
            return f" {index} network host address {member.address}"
        return f" {index} network subnet {member.address} {member.mask}"
    if member.type == "range" and member.start_address and member.end_address:
        return f" {index} network range {member.start_address} {member.end_address}"
    if member.type == "host-name" and member.host_name:
        return f" {index} network host name {member.host_name}"
    return ""


class ObjectGroupCompiler(FeatureCompiler):
    feature = Feature.OBJECT_GROUPS
    vendors = frozenset({Vendor.HUAWEI, Vendor.H3C})
    summary = "Firewall object groups"

    def emit_huawei(self, ctx: CompileContext, block: ObjectGroupConfig) -> list[str]:
        lines: list[str] = []
        if block.address_groups_enabled:
            for group in block.address_groups:
                if not (group.name and group.members):
                    continue
                lines.append(f"ip address-set {group.name} type object")
                if group.description:
                    lines.append(f' description "{group.description}"')
                for index, member in enumerate(group.members):
                    if member.type == "ip-mask" and member.address:
                        lines.append(f" address {index} {member.address} mask {member.mask or '32'}")
                    elif member.type == "range" and member.start_address and member.end_address:
                        lines.append(f" address {index} range {member.start_address} {member.end_address}")
                    elif member.type == "host-name":
                        ctx.note(f"address group {group.name}: host-name members belong in a domain set, skipped")
                lines.append("quit")

        if block.service_groups_enabled:
            for group in block.service_groups:
                if not (group.name and group.members):
                    continue
                lines.append(f"ip service-set {group.name} type object")
                if group.description:
                    lines.append(f' description "{group.description}"')
                for index, member in enumerate(group.members):
                    lines.append(
                        f" service {index} protocol{_protocol(member)}"
                        f"{_service_ports(member, 'source-port', 'destination-port')}"
                    )
                lines.append("quit")

        if block.domain_groups_enabled:
            for group in block.domain_groups:
                if not (group.name and group.members):
                    continue
                lines.append(f"domain-set name {group.name}")
                if group.description:
                    lines.append(f' description "{group.description}"')
                lines += [f" add domain {domain}" for domain in group.members if domain]
                lines.append("quit")
        return lines

    def emit_h3c(self, ctx: CompileContext, block: ObjectGroupConfig) -> list[str]:
        lines: list[str] = []
        address_groups = list(block.address_groups) if block.address_groups_enabled else []
        if block.domain_groups_enabled:
            # Comware keeps domains as host-name members of an address object group
            address_groups += [
                AddressGroup(
                    name=group.name,
                    description=group.description,
                    members=tuple(AddressMember(type="host-name", host_name=d) for d in group.members),
                )
                for group in block.domain_groups
            ]

        for group in address_groups:
            if not (group.name and group.members):
                continue
            lines.append(f"object-group ip address {group.name}")
            if group.description:
                lines.append(f' description "{group.description}"')
            for index, member in enumerate(group.members, start=1):
                member_line = _h3c_address_member(index, member)
                if member_line:
                    lines.append(member_line)
            lines.append("quit")

        if block.service_groups_enabled:
            for group in block.service_groups:
                if not (group.name and group.members):
                    continue
                lines.append(f"object-group service {group.name}")
                if group.description:
                    lines.append(f' description "{group.description}"')
                for index, member in enumerate(group.members, start=1):
                    lines.append(
                        f" {index} service{_protocol(member)}{_service_ports(member, 'source', 'destination')}"
                    )
                lines.append("quit")
        return lines
