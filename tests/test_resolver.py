"""Tests for cross-reference lookups and formatting helpers."""
from mcp_cli_synth.synthesis.dialect import get_dialect
from mcp_cli_synth.synthesis.resolver import (
    expand_port_range,
    find_acl,
    format_mac_dotted,
    format_mac_hyphen,
    format_vlan_ranges,
    ip_to_hex,
    parse_address,
    parse_vlan_list,
    port_base,
    prefix_length,
    resolve_acl,
    resolve_interface,
    vlan_list_for,
)
from mcp_cli_synth.synthesis.schema import (
    ACL,
    ACLsConfig,
    Configuration,
    Vendor,
)


def acl_config(*acls: ACL) -> Configuration:
    return Configuration(acl=ACLsConfig(enabled=True, acls=acls))


class TestACLLookup:
    """Tests for ACL resolution."""

    def test_resolve_by_id(self):
        """ACL id resolves to its number and name."""
        config = acl_config(ACL(id="a1", number="3000", name="WEB"))
        ref = resolve_acl(config, "a1")
        assert ref.number == "3000"
        assert ref.name == "WEB"
        assert ref.label == "WEB"

    def test_fallback_to_number_and_name(self):
        """Lookup falls back to number, then name."""
        config = acl_config(ACL(id="a1", number="2000"), ACL(id="a2", name="MGMT"))
        assert find_acl(config, "2000").id == "a1"
        assert find_acl(config, "MGMT").id == "a2"

    def test_label_without_name(self):
        """Label is the number when the ACL has no name."""
        ref = resolve_acl(acl_config(ACL(id="a1", number="2000")), "a1")
        assert ref.label == "2000"

    def test_dangling_reference(self):
        """Unknown or empty id resolves to None."""
        config = acl_config(ACL(id="a1", number="2000"))
        assert resolve_acl(config, "missing") is None
        assert resolve_acl(config, "") is None


class TestVlanLists:
    """Tests for VLAN list parsing and formatting."""

    def test_parse_mixed(self):
        """Commas, spaces, dashes and 'to' all parse."""
        assert parse_vlan_list("10,20-22") == [10, 20, 21, 22]
        assert parse_vlan_list("10 20 to 22") == [10, 20, 21, 22]

    def test_parse_ignores_garbage(self):
        """Non-numeric tokens and out-of-range ids are dropped."""
        assert parse_vlan_list("abc,5,0,4095") == [5]
        assert parse_vlan_list("") == []

    def test_parse_dedupes(self):
        """Duplicates collapse and output is sorted."""
        assert parse_vlan_list("30,10,10") == [10, 30]

    def test_format_dash(self):
        """Cisco style ranges."""
        assert format_vlan_ranges([1, 2, 3, 5], "dash") == "1-3,5"

    def test_format_to(self):
        """Huawei/H3C style ranges."""
        assert format_vlan_ranges([1, 2, 3, 5], "to") == "1 to 3 5"

    def test_adjacent_pair(self):
        """Two adjacent ids are written as a pair."""
        assert format_vlan_ranges([10, 11], "dash") == "10,11"

    def test_vlan_list_for_vendor(self):
        """Re-render a list in each vendor's syntax."""
        assert vlan_list_for(get_dialect(Vendor.CISCO), "10 to 12") == "10-12"
        assert vlan_list_for(get_dialect(Vendor.HUAWEI), "10-12") == "10 to 12"


class TestInterfaces:
    """Tests for interface and port helpers."""

    def test_resolve_interface(self):
        """Explicit names win over VLAN references."""
        huawei = get_dialect(Vendor.HUAWEI)
        assert resolve_interface(huawei, "GigabitEthernet0/0/1", "10") == "GigabitEthernet0/0/1"
        assert resolve_interface(huawei, "", "10") == "Vlanif10"
        assert resolve_interface(huawei) == ""

    def test_port_base(self):
        """Trailing port number is stripped."""
        assert port_base("GigabitEthernet0/0/1") == "GigabitEthernet0/0/"
        assert port_base("eth12") == "eth"

    def test_expand_port_range(self):
        """Range text expands against the port's base name."""
        assert expand_port_range("GigabitEthernet0/0/1", "1-3,8") == [
            "GigabitEthernet0/0/1",
            "GigabitEthernet0/0/2",
            "GigabitEthernet0/0/3",
            "GigabitEthernet0/0/8",
        ]

    def test_expand_without_range(self):
        """Empty range falls back to the port itself."""
        assert expand_port_range("Gi1/0/5", "") == ["Gi1/0/5"]


class TestAddressFormatting:
    """Tests for address and MAC formatting."""

    def test_prefix_length(self):
        """Dotted masks become prefix lengths."""
        assert prefix_length("255.255.255.0") == "24"
        assert prefix_length("16") == "16"

    def test_zero_mask_prefix_length(self):
        """The match-anything mask is a zero-length prefix."""
        assert prefix_length("0.0.0.0") == "0"

    def test_ip_to_hex(self):
        """IPv4 address to hex, empty on invalid input."""
        assert ip_to_hex("10.0.0.1") == "0a000001"
        assert ip_to_hex("not-an-ip") == ""

    def test_mac_formats(self):
        """MAC addresses in vendor forms."""
        assert format_mac_hyphen("AA:BB:CC:DD:EE:FF") == "aabb-ccdd-eeff"
        assert format_mac_dotted("aa-bb-cc-dd-ee-ff") == "aabb.ccdd.eeff"
        assert format_mac_hyphen("bogus") == "bogus"

    def test_parse_address(self):
        """CIDR, dotted mask and bare host forms."""
        assert parse_address("10.0.0.0/24") == ("10.0.0.0", "255.255.255.0")
        assert parse_address("10.0.0.0 255.255.0.0") == ("10.0.0.0", "255.255.0.0")
        assert parse_address("10.0.0.5") == ("10.0.0.5", "")
