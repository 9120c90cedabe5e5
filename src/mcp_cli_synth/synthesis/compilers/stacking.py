"""Stacking: H3C IRF, Huawei iStack/CSS and Cisco StackWise Virtual.

Member renumbering and the mode switch reboot the device. Those lines are
emitted last so everything before them is already applied.
"""
import re

from ..schema import Feature, StackingConfig, StackMember
from .base import CompileContext, FeatureCompiler

_MEMBER_SLOT = re.compile(r"^([A-Za-z-]+)(\d+)(/\d+/\d+)$")


def renumber_interface(name: str, member_id: str, new_member_id: str) -> str:
    """Move an interface to its new member slot: Ten-GigabitEthernet1/0/49 -> 2/0/49."""
    if not new_member_id or member_id == new_member_id:
        return name
    match = _MEMBER_SLOT.match(name)
    if match and match.group(2) == member_id:
        return f"{match.group(1)}{new_member_id}{match.group(3)}"
    return name


def _target_id(member: StackMember) -> str:
    return member.new_member_id or member.member_id


def _needs_renumber(member: StackMember) -> bool:
    return bool(member.member_id and member.new_member_id and member.member_id != member.new_member_id)


def _stack_port_members(member: StackMember) -> list[str]:
    if not member.stack_ports:
        return []
    return [name for name in member.stack_ports[0].port_group if name]


class StackingCompiler(FeatureCompiler):
    feature = Feature.STACKING
    summary = "Device stacking"

    def emit_h3c(self, ctx: CompileContext, block: StackingConfig) -> list[str]:
        members = [m for m in block.members if m.member_id]
        if block.model_type == "old":
            return self._h3c_old(ctx, block, members)

        lines: list[str] = []
        ports = [name for m in members for name in _stack_port_members(m)]
        for name in ports:
            lines += [f"interface {name}", " shutdown", "quit"]
        for member in members:
            if member.priority:
                lines.append(f"irf member {member.member_id} priority {member.priority}")
            group = _stack_port_members(member)
            if group:
                lines.append(f"irf-port {member.stack_ports[0].port_id}")
                lines += [f" port group interface {name}" for name in group]
                lines.append("quit")
        for name in ports:
            lines += [f"interface {name}", " undo shutdown", "quit"]
        if block.domain_id:
            lines.append(f"irf domain {block.domain_id}")
        lines += ["chassis convert mode irf", "Y"]
        ctx.note("'chassis convert mode irf' reboots the device into IRF mode, save the configuration first")
        return lines

    def _h3c_old(self, ctx: CompileContext, block: StackingConfig, members: list[StackMember]) -> list[str]:
        lines: list[str] = []
        if block.domain_id:
            lines.append(f"irf domain {block.domain_id}")
        for member in members:
            if member.priority:
                lines.append(f"irf member {member.member_id} priority {member.priority}")

        renamed: dict[str, str] = {}
        for member in members:
            for name in _stack_port_members(member):
                renamed[name] = renumber_interface(name, member.member_id, member.new_member_id)
        for name in dict.fromkeys(renamed.values()):
            lines += [f"interface {name}", " shutdown", "quit"]
        for member in members:
            group = _stack_port_members(member)
            if group:
                lines.append(f"irf-port {_target_id(member)}/{member.stack_ports[0].port_id}")
                lines += [f" port group interface {renamed.get(name, name)}" for name in group]
                lines.append("quit")
        for name in dict.fromkeys(renamed.values()):
            lines += [f"interface {name}", " undo shutdown", "quit"]
        lines.append("irf-port-configuration active")

        for member in members:
            if _needs_renumber(member):
                lines += [f"irf member {member.member_id} renumber {member.new_member_id}", "Y"]
                ctx.note(f"member {member.member_id} takes ID {member.new_member_id} after the next reboot")
        return lines

    def emit_huawei(self, ctx: CompileContext, block: StackingConfig) -> list[str]:
        members = [m for m in block.members if m.member_id]
        lines: list[str] = []
        if block.domain_id:
            lines.append(f"stack domain {block.domain_id}")
        for member in members:
            for index, name in enumerate(_stack_port_members(member), start=1):
                lines += [
                    f"interface stack-port {member.member_id}/{index}",
                    f" port interface {name} enable",
                    "Y",
                    "quit",
                ]
        for member in members:
            if member.priority:
                lines.append(f"stack slot {member.member_id} priority {member.priority}")
        for member in members:
            if _needs_renumber(member):
                lines += [f"stack slot {member.member_id} renumber {member.new_member_id}", "Y"]
                ctx.note(f"slot {member.member_id} takes ID {member.new_member_id} after the next reboot")
        return lines

    def emit_cisco(self, ctx: CompileContext, block: StackingConfig) -> list[str]:
        members = [m for m in block.members if m.member_id]
        if len(members) > 2:
            ctx.note("StackWise Virtual pairs two switches, members beyond the second are ignored")
            members = members[:2]

        lines = ["stackwise-virtual"]
        if block.domain_id:
            lines.append(f" domain {block.domain_id}")
        lines.append("exit")
        for member in members:
            for link_id, name in enumerate(_stack_port_members(member), start=1):
                lines += [f"interface {name}", f" stackwise-virtual link {link_id}", "exit"]
        for member in members:
            if member.priority:
                lines.append(f"switch {_target_id(member)} priority {member.priority}")
        for member in members:
            if _needs_renumber(member):
                lines.append(f"switch {member.member_id} renumber {member.new_member_id}")
                ctx.note(f"switch {member.member_id} takes number {member.new_member_id} after reload")
        return lines
