"""IPsec transform sets, IKE keychains and profiles, and IPsec policies."""
from typing import Optional

from ..resolver import ACLRef, find_ike_profile, find_keychain, find_transform_set, resolve_acl
from ..schema import Feature, IPsecConfig, IPsecPolicy, IPsecTransformSet
from .base import CompileContext, FeatureCompiler

CISCO_ESP_CIPHERS = {
    "des": "esp-des",
    "3des": "esp-3des",
    "aes-cbc-128": "esp-aes",
    "aes-cbc-192": "esp-aes 192",
    "aes-cbc-256": "esp-aes 256",
}
CISCO_HMACS = {"md5": "md5-hmac", "sha1": "sha-hmac", "sha256": "sha256-hmac", "sha384": "sha384-hmac"}


def sa_protocols(transform_set: IPsecTransformSet) -> list[str]:
    """Security protocols a transform set negotiates, in command order."""
    if transform_set.protocol == "ah-esp":
        return ["esp", "ah"]
    return [transform_set.protocol or "esp"]


def _transform_text(ts: IPsecTransformSet) -> str:
    algorithms = [a for a in (ts.esp_encryption, ts.esp_auth, ts.ah_auth) if a]
    text = f"Defines transform set '{ts.name}' using {ts.protocol or 'esp'}"
    if algorithms:
        text += f" with {', '.join(algorithms)}"
    return text + "."


def _keychain_text(name: str) -> str:
    return f"Defines keychain '{name}' holding the pre-shared keys for IKE peers."


def _profile_text(name: str, remote: str) -> str:
    if remote:
        return f"Defines IKE profile '{name}' for peer {remote}."
    return f"Defines IKE profile '{name}'."


def _policy_text(policy: IPsecPolicy, acl: Optional[ACLRef]) -> str:
    text = f"Creates {policy.mode} IPsec policy '{policy.name}' entry {policy.seq_number}"
    if acl is not None:
        text += f", protecting traffic matched by ACL {acl.label}"
    if policy.remote_address:
        text += f", towards peer {policy.remote_address}"
    return text + "."


class IPsecCompiler(FeatureCompiler):
    feature = Feature.IPSEC
    summary = "IPsec VPN"

    def _policy_refs(self, ctx: CompileContext, policy: IPsecPolicy):
        """Resolve a policy's ACL and transform sets, noting each dangling id."""
        owner = f"IPsec policy {policy.name} {policy.seq_number}"
        acl = resolve_acl(ctx.config, policy.acl_id) if policy.acl_id else None
        if policy.acl_id and acl is None:
            ctx.note(f"{owner}: ACL '{policy.acl_id}' not found, security ACL omitted")

        transform_sets = []
        for set_id in policy.transform_set_ids:
            found = find_transform_set(ctx.config, set_id)
            if found is None or not found.name:
                ctx.note(f"{owner}: transform set '{set_id}' not found, omitted")
            else:
                transform_sets.append(found)

        profile = None
        if policy.mode == "isakmp" and policy.ike_profile_id:
            profile = find_ike_profile(ctx.config, policy.ike_profile_id)
            if profile is None or not profile.name:
                ctx.note(f"{owner}: IKE profile '{policy.ike_profile_id}' not found, omitted")
                profile = None
        return acl, transform_sets, profile

    def _keychain_name(self, ctx: CompileContext, owner: str, keychain_id: str) -> str:
        if not keychain_id:
            return ""
        keychain = find_keychain(ctx.config, keychain_id)
        if keychain is None or not keychain.name:
            ctx.note(f"{owner}: keychain '{keychain_id}' not found, omitted")
            return ""
        return keychain.name

    @staticmethod
    def _complete(policies):
        return [p for p in policies if p.name and p.seq_number]

    # --- Cisco ---

    def emit_cisco(self, ctx: CompileContext, block: IPsecConfig) -> list[str]:
        lines: list[str] = []
        for ts in block.transform_sets:
            if not ts.name:
                continue
            transforms = []
            if "esp" in sa_protocols(ts):
                if ts.esp_encryption:
                    transforms.append(CISCO_ESP_CIPHERS.get(ts.esp_encryption, f"esp-{ts.esp_encryption}"))
                if ts.esp_auth:
                    transforms.append(f"esp-{CISCO_HMACS.get(ts.esp_auth, ts.esp_auth)}")
            if "ah" in sa_protocols(ts) and ts.ah_auth:
                transforms.append(f"ah-{CISCO_HMACS.get(ts.ah_auth, ts.ah_auth)}")
            if not transforms:
                ctx.note(f"transform set {ts.name}: no algorithms selected, skipped")
                continue
            ctx.add(
                lines,
                f"crypto ipsec transform-set {ts.name} {' '.join(transforms)}",
                _transform_text(ts),
            )
            if ts.encapsulation_mode in ("tunnel", "transport"):
                lines.append(f" mode {ts.encapsulation_mode}")
            lines.append("exit")

        for keychain in block.ike_keychains:
            if not keychain.name:
                continue
            ctx.add(lines, f"crypto keyring {keychain.name}", _keychain_text(keychain.name))
            for psk in keychain.preshared_keys:
                if psk.address and psk.key:
                    lines.append(f" pre-shared-key address {psk.address} {psk.mask or '255.255.255.255'} key {psk.key}")
            lines.append("exit")

        for profile in block.ike_profiles:
            if not profile.name:
                continue
            ctx.add(lines, f"crypto isakmp profile {profile.name}", _profile_text(profile.name, profile.match_remote_address))
            keychain = self._keychain_name(ctx, f"IKE profile {profile.name}", profile.keychain_id)
            if keychain:
                lines.append(f" keyring {keychain}")
            if profile.match_remote_address:
                lines.append(f" match identity address {profile.match_remote_address}")
            lines.append("exit")

        for policy in self._complete(block.policies):
            acl, transform_sets, profile = self._policy_refs(ctx, policy)
            kind = "ipsec-manual" if policy.mode == "manual" else "ipsec-isakmp"
            ctx.add(lines, f"crypto map {policy.name} {policy.seq_number} {kind}", _policy_text(policy, acl))
            if acl is not None:
                lines.append(f" match address {acl.label}")
            if transform_sets:
                lines.append(f" set transform-set {' '.join(t.name for t in transform_sets)}")
            if policy.remote_address:
                lines.append(f" set peer {policy.remote_address}")
            if profile is not None:
                lines.append(f" set isakmp-profile {profile.name}")
            if policy.mode == "manual" and policy.manual_sa and transform_sets:
                sa = policy.manual_sa
                for protocol in sa_protocols(transform_sets[0]):
                    suffix = " cipher" if protocol == "esp" else ""
                    lines.append(f" set session-key inbound {protocol} {sa.inbound_spi}{suffix} {sa.inbound_key}")
                    lines.append(f" set session-key outbound {protocol} {sa.outbound_spi}{suffix} {sa.outbound_key}")
            lines.append("exit")
        return lines

    # --- Huawei ---

    def emit_huawei(self, ctx: CompileContext, block: IPsecConfig) -> list[str]:
        lines: list[str] = []
        for ts in block.transform_sets:
            if not ts.name:
                continue
            protocols = sa_protocols(ts)
            ctx.add(lines, f"ipsec proposal {ts.name}", _transform_text(ts))
            lines.append(f" transform {ts.protocol}")
            if ts.encapsulation_mode and ts.encapsulation_mode != "auto":
                lines.append(f" encapsulation-mode {ts.encapsulation_mode}")
            if "esp" in protocols:
                if ts.esp_encryption:
                    lines.append(f" esp encryption-algorithm {ts.esp_encryption}")
                if ts.esp_auth:
                    lines.append(f" esp authentication-algorithm {ts.esp_auth}")
            if "ah" in protocols and ts.ah_auth:
                lines.append(f" ah authentication-algorithm {ts.ah_auth}")
            lines.append("quit")

        for keychain in block.ike_keychains:
            if not keychain.name:
                continue
            ctx.add(lines, f"ike keychain {keychain.name}", _keychain_text(keychain.name))
            lines += [f" pre-shared-key key simple {psk.key}" for psk in keychain.preshared_keys if psk.key]
            lines.append("quit")

        for profile in block.ike_profiles:
            if not profile.name:
                continue
            ctx.add(lines, f"ike peer {profile.name}", _profile_text(profile.name, profile.match_remote_address))
            keychain = self._keychain_name(ctx, f"IKE peer {profile.name}", profile.keychain_id)
            if keychain:
                lines.append(f" pre-shared-key keychain {keychain}")
            if profile.match_remote_address:
                lines.append(f" remote-address {profile.match_remote_address.split()[0]}")
            identity = profile.local_identity.split()
            if len(identity) == 2:
                lines.append(f" local-id-type {identity[0]} {identity[1]}")
            lines.append("quit")

        for policy in self._complete(block.policies):
            acl, transform_sets, profile = self._policy_refs(ctx, policy)
            ctx.add(lines, f"ipsec policy {policy.name} {policy.seq_number} {policy.mode}", _policy_text(policy, acl))
            if acl is not None:
                lines.append(f" security acl {acl.number or acl.name}")
            lines += [f" proposal {t.name}" for t in transform_sets]
            if policy.mode == "isakmp":
                if profile is not None:
                    lines.append(f" ike-peer {profile.name}")
                if policy.local_address:
                    lines.append(f" tunnel local {policy.local_address}")
            else:
                if policy.local_address:
                    lines.append(f" tunnel local {policy.local_address}")
                if policy.remote_address:
                    lines.append(f" tunnel remote {policy.remote_address}")
                lines += self._manual_sa(policy, transform_sets, key_prefix="")
            lines.append("quit")
        return lines

    @staticmethod
    def _manual_sa(policy: IPsecPolicy, transform_sets, key_prefix: str) -> list[str]:
        sa = policy.manual_sa
        if sa is None:
            return []
        protocols = sa_protocols(transform_sets[0]) if transform_sets else ["esp"]
        lines = []
        for protocol in protocols:
            lines += [
                f" sa spi inbound {protocol} {sa.inbound_spi}",
                f" sa string-key inbound {protocol} {key_prefix}{sa.inbound_key}",
                f" sa spi outbound {protocol} {sa.outbound_spi}",
                f" sa string-key outbound {protocol} {key_prefix}{sa.outbound_key}",
            ]
        return lines

    # --- H3C ---

    def emit_h3c(self, ctx: CompileContext, block: IPsecConfig) -> list[str]:
        lines: list[str] = []
        for ts in block.transform_sets:
            if not ts.name:
                continue
            ctx.add(lines, f"ipsec transform-set {ts.name}", _transform_text(ts))
            if ts.protocol:
                lines.append(f" protocol {ts.protocol}")
            if ts.encapsulation_mode and ts.encapsulation_mode != "auto":
                lines.append(f" encapsulation-mode {ts.encapsulation_mode}")
            if ts.esp_encryption:
                lines.append(f" esp encryption-algorithm {ts.esp_encryption}")
            if ts.esp_auth:
                lines.append(f" esp authentication-algorithm {ts.esp_auth}")
            if ts.ah_auth:
                lines.append(f" ah authentication-algorithm {ts.ah_auth}")
            if ts.pfs:
                lines.append(f" pfs {ts.pfs}")
            lines.append("quit")

        for keychain in block.ike_keychains:
            if not keychain.name:
                continue
            ctx.add(lines, f"ike keychain {keychain.name}", _keychain_text(keychain.name))
            for psk in keychain.preshared_keys:
                if psk.address and psk.key:
                    lines.append(f" pre-shared-key address {psk.address} {psk.mask or '0'} key simple {psk.key}")
            lines.append("quit")

        for profile in block.ike_profiles:
            if not profile.name:
                continue
            ctx.add(lines, f"ike profile {profile.name}", _profile_text(profile.name, profile.match_remote_address))
            keychain = self._keychain_name(ctx, f"IKE profile {profile.name}", profile.keychain_id)
            if keychain:
                lines.append(f" keychain {keychain}")
            if profile.local_identity:
                lines.append(f" local-identity {profile.local_identity}")
            if profile.match_remote_address:
                lines.append(f" match remote identity address {profile.match_remote_address}")
            lines.append("quit")

        for policy in self._complete(block.policies):
            acl, transform_sets, profile = self._policy_refs(ctx, policy)
            ctx.add(lines, f"ipsec policy {policy.name} {policy.seq_number} {policy.mode}", _policy_text(policy, acl))
            if acl is not None:
                lines.append(f" security acl {acl.number or acl.name}")
            lines += [f" transform-set {t.name}" for t in transform_sets]
            if policy.remote_address:
                lines.append(f" remote-address {policy.remote_address}")
            if policy.local_address:
                lines.append(f" local-address {policy.local_address}")
            if profile is not None:
                lines.append(f" ike-profile {profile.name}")
            if policy.mode == "manual":
                lines += self._manual_sa(policy, transform_sets, key_prefix="simple ")
            lines.append("quit")
        return lines
