"""WLAN: Comware service templates and VRP profile chains, AP groups and APs."""
from ..resolver import format_mac_hyphen
from ..schema import Feature, Vendor, WirelessConfig
from .base import CompileContext, FeatureCompiler

SECURITY_IE = {
    "wpa": [" security-ie wpa", " cipher-suite tkip"],
    "wpa2": [" security-ie rsn", " cipher-suite ccmp"],
    "wpa-wpa2": [" security-ie wpa", " security-ie rsn", " cipher-suite tkip", " cipher-suite ccmp"],
}
DEFAULT_AP_MODEL = "WA6320-HCL"


class WirelessCompiler(FeatureCompiler):
    feature = Feature.WIRELESS
    vendors = frozenset({Vendor.HUAWEI, Vendor.H3C})
    summary = "Wireless LAN"

    def emit_h3c(self, ctx: CompileContext, block: WirelessConfig) -> list[str]:
        lines: list[str] = []
        templates = {t.template_name: t for t in block.service_templates if t.template_name}
        for template in templates.values():
            lines.append(f'wlan service-template "{template.template_name}"')
            if template.ssid:
                lines.append(f' ssid "{template.ssid}"')
            if template.ssid_hide:
                lines.append(" beacon ssid-hide")
            if template.description:
                lines.append(f' description "{template.description}"')
            if template.default_vlan:
                lines.append(f" vlan {template.default_vlan}")
            if template.max_clients:
                lines.append(f" client max-count {template.max_clients}")
            if template.auth_mode == "static-psk":
                lines.append(" akm mode psk")
                if template.psk_password:
                    kind = "raw-key" if template.psk_type == "rawkey" else "pass-phrase"
                    lines.append(f" preshared-key {kind} simple {template.psk_password}")
                else:
                    ctx.note(f"service template {template.template_name}: PSK mode without a key")
                lines += SECURITY_IE.get(template.security_mode, [])
            if template.enabled:
                lines.append(" service-template enable")
            lines.append("quit")

        for ap in block.ap_devices:
            if not (ap.ap_name and ap.serial_number):
                continue
            lines += [
                f'wlan ap "{ap.ap_name}" model "{ap.model or DEFAULT_AP_MODEL}"',
                f" serial-id {ap.serial_number}",
                "quit",
            ]

        for group in block.ap_groups:
            if not group.group_name:
                continue
            lines.append(f'wlan ap-group "{group.group_name}"')
            if group.description:
                lines.append(f' description "{group.description}"')
            members = [ap for ap in block.ap_devices if ap.group_name == group.group_name and ap.ap_name]
            lines += [f' ap "{ap.ap_name}"' for ap in members]

            bound = []
            for name in group.service_templates:
                template = templates.get(name)
                if template is None:
                    ctx.note(f"AP group {group.group_name}: service template '{name}' not found, binding omitted")
                else:
                    bound.append(template)
            models = sorted({ap.model for ap in members if ap.model})
            for model in models:
                lines.append(f' ap-model "{model}"')
                for radio in ("1", "2"):
                    lines.append(f"  radio {radio}")
                    for template in bound:
                        vlan = group.vlan_id or template.default_vlan
                        suffix = f" vlan {vlan}" if vlan else ""
                        lines.append(f'   service-template "{template.template_name}"{suffix}')
                    lines += ["   radio enable", "  quit"]
                lines.append(" quit")
            lines.append("quit")
        return lines

    def emit_huawei(self, ctx: CompileContext, block: WirelessConfig) -> list[str]:
        lines = ["wlan"]
        if block.ac_source_interface:
            lines.append(f" ac-source interface {block.ac_source_interface}")
        else:
            ctx.note("no AC source interface, APs cannot establish CAPWAP tunnels")
        if block.country_code:
            lines.append(f" country-code {block.country_code}")
        if block.ap_auth_mode:
            lines.append(f" ap auth-mode {block.ap_auth_mode}-auth")

        security_names = {p.profile_name for p in block.security_profiles if p.profile_name}
        ssid_names = {p.profile_name for p in block.ssid_profiles if p.profile_name}
        vap_names = {p.profile_name for p in block.vap_profiles if p.profile_name}
        group_names = {g.group_name for g in block.ap_groups if g.group_name}

        for profile in block.security_profiles:
            if not profile.profile_name:
                continue
            lines.append(f' security-profile name "{profile.profile_name}"')
            if profile.psk:
                lines.append(f"  security wpa2 psk pass-phrase {profile.psk} aes")
            lines.append(" quit")

        for profile in block.ssid_profiles:
            if profile.profile_name:
                lines += [f' ssid-profile name "{profile.profile_name}"', f'  ssid "{profile.ssid}"', " quit"]

        for vap in block.vap_profiles:
            if not vap.profile_name:
                continue
            lines.append(f' vap-profile name "{vap.profile_name}"')
            if vap.forward_mode:
                lines.append(f"  forward-mode {vap.forward_mode}")
            if vap.vlan_id:
                lines.append(f"  service-vlan vlan-id {vap.vlan_id}")
            if vap.security_profile in security_names:
                lines.append(f'  security-profile "{vap.security_profile}"')
            elif vap.security_profile:
                ctx.note(f"VAP profile {vap.profile_name}: security profile '{vap.security_profile}' not found")
            if vap.ssid_profile in ssid_names:
                lines.append(f'  ssid-profile "{vap.ssid_profile}"')
            elif vap.ssid_profile:
                ctx.note(f"VAP profile {vap.profile_name}: SSID profile '{vap.ssid_profile}' not found")
            lines.append(" quit")

        for group in block.ap_groups:
            if not group.group_name:
                continue
            lines.append(f' ap-group name "{group.group_name}"')
            if group.description:
                lines.append(f'  description "{group.description}"')
            for wlan_id, binding in enumerate(group.vap_bindings, start=1):
                if binding.vap_profile_name not in vap_names:
                    ctx.note(f"AP group {group.group_name}: VAP profile '{binding.vap_profile_name}' not found")
                    continue
                lines.append(f'  vap-profile "{binding.vap_profile_name}" wlan {wlan_id} radio {binding.radio}')
            lines.append(" quit")

        for ap_id, ap in enumerate(block.ap_devices):
            by_sn = block.ap_auth_mode == "sn"
            identity = ap.serial_number if by_sn else format_mac_hyphen(ap.mac_address)
            if not identity:
                continue
            lines.append(f" ap-id {ap_id} {'ap-sn' if by_sn else 'ap-mac'} {identity}")
            if ap.ap_name:
                lines.append(f"  ap-name {ap.ap_name}")
            if ap.group_name in group_names:
                lines.append(f"  ap-group {ap.group_name}")
            elif ap.group_name:
                ctx.note(f"AP {ap.ap_name or identity}: AP group '{ap.group_name}' not found")
            lines.append(" quit")
        lines.append("quit")
        return lines
