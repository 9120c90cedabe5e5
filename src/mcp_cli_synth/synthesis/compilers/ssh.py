"""SSH server, local users and VTY lines."""
from ..schema import Feature, SSHConfig, SSHUser
from .base import CompileContext, FeatureCompiler


def _usable(users: tuple[SSHUser, ...]) -> list[SSHUser]:
    return [u for u in users if u.username and u.password]


class SSHCompiler(FeatureCompiler):
    feature = Feature.SSH
    summary = "SSH management access"

    def emit_cisco(self, ctx: CompileContext, block: SSHConfig) -> list[str]:
        lines: list[str] = []
        if block.domain_name:
            lines.append(f"ip domain-name {block.domain_name}")
        else:
            ctx.note("no domain name set, IOS needs one before it can generate the RSA key")
        lines += ["crypto key generate rsa modulus 2048", "ip ssh version 2"]
        if block.source_interface:
            lines.append(f"ip ssh source-interface {block.source_interface}")
        lines += [f"username {u.username} privilege 15 secret {u.password}" for u in _usable(block.users)]
        lines += [
            f"line vty {block.vty_lines}",
            " login local",
            f" transport input {block.protocol_inbound}",
            "exit",
        ]
        return lines

    def emit_huawei(self, ctx: CompileContext, block: SSHConfig) -> list[str]:
        users = _usable(block.users)
        lines = ["stelnet server enable"]
        if block.source_interface:
            lines.append(f"ssh server-source -i {block.source_interface}")
        if users:
            lines.append("aaa")
            for user in users:
                lines += [
                    f" local-user {user.username} password irreversible-cipher {user.password}",
                    f" local-user {user.username} service-type ssh",
                    f" local-user {user.username} privilege level 15",
                ]
            lines.append("quit")
            lines += [f"ssh user {u.username} authentication-type {u.auth_type}" for u in users]
        lines += [
            f"user-interface vty {block.vty_lines}",
            " authentication-mode aaa",
            " user privilege level 15",
            f" protocol inbound {block.protocol_inbound}",
            "quit",
        ]
        return lines

    def emit_h3c(self, ctx: CompileContext, block: SSHConfig) -> list[str]:
        lines = ["ssh server enable"]
        for user in _usable(block.users):
            lines += [
                f"local-user {user.username} class manage",
                f" password simple {user.password}",
                " service-type ssh",
                " authorization-attribute user-role network-admin",
                "quit",
            ]
        lines += [
            f"line vty {block.vty_lines}",
            f" authentication-mode {block.authentication_mode}",
            " user-role network-admin",
            f" protocol inbound {block.protocol_inbound}",
            "quit",
        ]
        return lines
