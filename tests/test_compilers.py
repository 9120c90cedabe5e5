"""Tests for per-feature compilers."""
import pytest

from mcp_cli_synth.synthesis.compilers import COMPILERS, get_compiler, parse_feature
from mcp_cli_synth.synthesis.compilers.dhcp import lease_to_minutes
from mcp_cli_synth.synthesis.compilers.interfaces import render_link_modes, render_vlan_database
from mcp_cli_synth.synthesis.compilers.link_aggregation import (
    bundled_port_names,
    detect_link_aggregation_members,
    uses_lacp,
)
from mcp_cli_synth.synthesis.compilers.stacking import renumber_interface
from mcp_cli_synth.synthesis.dialect import get_dialect
from mcp_cli_synth.synthesis.errors import UnknownFeatureError
from mcp_cli_synth.synthesis.schema import (
    ACL,
    ACLRule,
    ACLsConfig,
    AddressGroup,
    AddressMember,
    Configuration,
    Connection,
    DHCPConfig,
    DHCPPool,
    DHCPRelayConfig,
    DHCPRelayInterface,
    DHCPRelayServer,
    DHCPSnoopingConfig,
    DHCPSnoopingInterface,
    Device,
    DeviceType,
    EMPTY_OUTPUT,
    Endpoint,
    Feature,
    GREConfig,
    GRETunnel,
    HAConfig,
    IPsecConfig,
    IPsecPolicy,
    IPsecTransformSet,
    LinkAggregationConfig,
    LinkAggregationMember,
    LinkConfig,
    LinkMode,
    NATAddressPool,
    NATConfig,
    NATPoolSection,
    NATSourceRule,
    NATStaticRule,
    ObjectGroupConfig,
    Port,
    PortIsolationConfig,
    PortIsolationGroup,
    RoutingConfig,
    SecurityConfig,
    SecurityPolicy,
    SecurityZone,
    SSHConfig,
    SSHUser,
    StackingConfig,
    StackMember,
    StackPort,
    StaticRoute,
    STPConfig,
    STPPortConfig,
    TimeRange,
    Vendor,
    VLANConfig,
    VLANInterface,
    VRRPConfig,
    VRRPGroup,
    VRRPInterface,
    WirelessConfig,
    ServiceTemplate,
    APDevice,
    APGroup,
)

PORTS = (
    Port(id="p1", name="GigabitEthernet0/0/1"),
    Port(id="p2", name="GigabitEthernet0/0/2"),
)


def make_device(
    vendor: Vendor = Vendor.HUAWEI,
    device_type: DeviceType = DeviceType.ROUTER,
    **blocks,
) -> Device:
    return Device(
        id="dev1",
        name="DEV1",
        vendor=vendor,
        device_type=device_type,
        ports=PORTS,
        config=Configuration(**blocks),
    )


def link(port_id: str, mode: LinkMode = LinkMode.UNCONFIGURED, **kwargs) -> Connection:
    return Connection(
        id=f"c-{port_id}",
        source=Endpoint(node_id="dev1", port_id=port_id),
        target=Endpoint(node_id="peer", port_id="x"),
        config=LinkConfig(mode=mode, **kwargs),
    )


def compile_lines(feature: Feature, device: Device, connections=()) -> list[str]:
    return get_compiler(feature).compile(device, connections).cli.splitlines()


DHCP_LEASE = DHCPConfig(enabled=True, pools=(DHCPPool(
    pool_name="LAN",
    network="192.168.1.0",
    subnet_mask="255.255.255.0",
    gateway="192.168.1.1",
    lease_days="1",
    lease_hours="2",
    lease_minutes="3",
    lease_seconds="4",
),))


class TestCompilerContract:
    """Tests for the behaviour every compiler shares."""

    def test_registry_covers_every_feature(self):
        """Each feature has exactly one compiler."""
        assert set(COMPILERS) == set(Feature)

    @pytest.mark.parametrize("vendor", [Vendor.CISCO, Vendor.HUAWEI, Vendor.H3C])
    @pytest.mark.parametrize("device_type", list(DeviceType))
    def test_disabled_is_empty(self, vendor, device_type):
        """A fresh configuration compiles to nothing for every feature."""
        device = make_device(vendor, device_type)
        for compiler in COMPILERS.values():
            assert compiler.compile(device) == EMPTY_OUTPUT

    def test_inapplicable_is_empty(self):
        """Enabled features on the wrong device type compile to nothing."""
        device = make_device(Vendor.HUAWEI, DeviceType.L2_SWITCH, dhcp=DHCP_LEASE)
        assert get_compiler(Feature.DHCP).compile(device) == EMPTY_OUTPUT

    def test_vendor_outside_compiler_is_empty(self):
        """Huawei/H3C-only features compile to nothing on Cisco."""
        security = SecurityConfig(zones_enabled=True, zones=(SecurityZone(name="trust"),))
        device = make_device(Vendor.CISCO, DeviceType.FIREWALL, security=security)
        assert get_compiler(Feature.SECURITY).compile(device) == EMPTY_OUTPUT

    def test_generic_vendor_is_empty(self):
        """Generic devices never produce CLI."""
        device = make_device(Vendor.GENERIC, dhcp=DHCP_LEASE)
        assert get_compiler(Feature.DHCP).compile(device) == EMPTY_OUTPUT

    def test_deterministic(self):
        """Compiling the same device twice gives identical output."""
        device = make_device(Vendor.H3C, dhcp=DHCP_LEASE)
        compiler = get_compiler(Feature.DHCP)
        assert compiler.compile(device) == compiler.compile(device)

    def test_explanation_headline(self):
        """Explanation starts with a summary naming vendor and type."""
        output = get_compiler(Feature.DHCP).compile(make_device(Vendor.HUAWEI, dhcp=DHCP_LEASE))
        assert output.explanation.splitlines()[0] == "DHCP server pools for Huawei Router."

    def test_enabled_but_empty(self):
        """An enabled feature with nothing to emit says so."""
        device = make_device(Vendor.HUAWEI, acl=ACLsConfig(enabled=True))
        output = get_compiler(Feature.ACL).compile(device)
        assert output.cli == ""
        assert "nothing to configure" in output.explanation

    def test_body_is_not_wrapped(self):
        """Single-feature output carries no global mode commands."""
        for vendor in (Vendor.CISCO, Vendor.HUAWEI, Vendor.H3C):
            lines = compile_lines(Feature.DHCP, make_device(vendor, dhcp=DHCP_LEASE))
            dialect = get_dialect(vendor)
            assert dialect.global_enter not in lines
            assert dialect.global_exit not in lines


class TestFeatureLookup:
    """Tests for feature name parsing."""

    def test_parse_feature_forms(self):
        """Display name, key, lowercase and enum all resolve."""
        assert parse_feature("DHCP Relay") == Feature.DHCP_RELAY
        assert parse_feature("dhcp_relay") == Feature.DHCP_RELAY
        assert parse_feature("gre vpn") == Feature.GRE
        assert parse_feature(Feature.NAT) == Feature.NAT

    def test_unknown_feature(self):
        """Unknown names raise UnknownFeatureError."""
        with pytest.raises(UnknownFeatureError):
            get_compiler("QoS")


class TestDHCP:
    """Tests for DHCP pools and lease reassembly."""

    def test_lease_rounding(self):
        """Seconds round up to the next minute with carry."""
        assert lease_to_minutes(1, 2, 3, 4) == (1, 2, 4)
        assert lease_to_minutes(0, 23, 59, 30) == (1, 0, 0)
        assert lease_to_minutes(0, 0, 5, 0) == (0, 0, 5)

    def test_h3c_lease_keeps_all_fields(self):
        """H3C lease carries days, hours, minutes and seconds."""
        lines = compile_lines(Feature.DHCP, make_device(Vendor.H3C, dhcp=DHCP_LEASE))
        assert " expired day 1 hour 2 minute 3 second 4" in lines
        assert "dhcp server ip-pool LAN" in lines

    def test_huawei_lease(self):
        """Huawei lease combines every field at minute precision."""
        output = get_compiler(Feature.DHCP).compile(make_device(Vendor.HUAWEI, dhcp=DHCP_LEASE))
        lines = output.cli.splitlines()
        assert lines[0] == "dhcp enable"
        assert "ip pool LAN" in lines
        assert " gateway-list 192.168.1.1" in lines
        assert " network 192.168.1.0 mask 255.255.255.0" in lines
        assert " lease day 1 hour 2 minute 4" in lines
        assert "rounded up" in output.explanation

    def test_cisco_pool(self):
        """Cisco pool with lease and option 43."""
        pool = DHCPPool(pool_name="AP", network="10.0.0.0", subnet_mask="255.255.255.0",
                        option43="10.0.0.1", lease_days="1", lease_hours="2",
                        lease_minutes="3", lease_seconds="4",
                        exclude_start="10.0.0.1", exclude_end="10.0.0.10")
        device = make_device(Vendor.CISCO, dhcp=DHCPConfig(enabled=True, pools=(pool,)))
        lines = compile_lines(Feature.DHCP, device)
        assert lines[:2] == ["service dhcp", "ip dhcp excluded-address 10.0.0.1 10.0.0.10"]
        assert " network 10.0.0.0 255.255.255.0" in lines
        assert " option 43 hex f1040a000001" in lines
        assert " lease 1 2 4" in lines
        assert lines[-1] == "exit"


class TestDHCPRelayAndSnooping:
    """Tests for DHCP relay and snooping."""

    def test_cisco_helper_address(self):
        """Cisco relays through ip helper-address."""
        relay = DHCPRelayConfig(enabled=True, interfaces=(
            DHCPRelayInterface(interface_name="Vlan10", server_addresses=(
                DHCPRelayServer(ip="10.1.1.1"),
                DHCPRelayServer(ip="10.1.1.2", vpn_instance="MGMT"),
            )),
        ))
        lines = compile_lines(Feature.DHCP_RELAY, make_device(Vendor.CISCO, dhcp_relay=relay))
        assert lines == [
            "service dhcp",
            "interface Vlan10",
            " ip helper-address 10.1.1.1",
            " ip helper-address vrf MGMT 10.1.1.2",
            "exit",
        ]

    def test_cisco_relay_without_servers(self):
        """An interface without servers is skipped with a note."""
        relay = DHCPRelayConfig(enabled=True, interfaces=(DHCPRelayInterface(interface_name="Vlan10"),))
        output = get_compiler(Feature.DHCP_RELAY).compile(make_device(Vendor.CISCO, dhcp_relay=relay))
        assert "Vlan10" not in output.cli
        assert "no relay server address" in output.explanation

    def test_huawei_relay(self):
        """Huawei relays with dhcp select relay."""
        relay = DHCPRelayConfig(enabled=True, interfaces=(
            DHCPRelayInterface(interface_name="Vlanif10", server_addresses=(DHCPRelayServer(ip="10.1.1.1"),)),
        ))
        lines = compile_lines(Feature.DHCP_RELAY, make_device(Vendor.HUAWEI, dhcp_relay=relay))
        assert "interface Vlanif10" in lines
        assert " dhcp select relay" in lines
        assert " dhcp relay server-ip 10.1.1.1" in lines

    def test_snooping_vlan_ranges(self):
        """Snooping VLAN lists follow each vendor's range syntax."""
        snooping = DHCPSnoopingConfig(
            enabled=True,
            enabled_on_vlans="10,11,12,20",
            interfaces=(DHCPSnoopingInterface(interface_name="GigabitEthernet0/0/1", trust=True),),
        )
        cisco = compile_lines(
            Feature.DHCP_SNOOPING, make_device(Vendor.CISCO, DeviceType.L2_SWITCH, dhcp_snooping=snooping)
        )
        huawei = compile_lines(
            Feature.DHCP_SNOOPING, make_device(Vendor.HUAWEI, DeviceType.L2_SWITCH, dhcp_snooping=snooping)
        )
        assert "ip dhcp snooping vlan 10-12,20" in cisco
        assert " ip dhcp snooping trust" in cisco
        assert "dhcp snooping enable vlan 10 to 12 20" in huawei
        assert " dhcp snooping trusted" in huawei


class TestVLANInterfaces:
    """Tests for VLAN interfaces, link modes and the VLAN database."""

    VLAN = VLANConfig(enabled=True, vlan_interfaces=(
        VLANInterface(vlan_id="10", ip_address="10.0.10.1", subnet_mask="255.255.255.0"),
    ))

    @pytest.mark.parametrize("vendor,name", [
        (Vendor.CISCO, "Vlan10"),
        (Vendor.HUAWEI, "Vlanif10"),
        (Vendor.H3C, "Vlan-interface10"),
    ])
    def test_vlan_interface_naming(self, vendor, name):
        """VLAN 10 is named per vendor."""
        lines = compile_lines(Feature.VLAN, make_device(vendor, DeviceType.L3_SWITCH, vlan=self.VLAN))
        assert lines[0] == f"interface {name}"
        assert " ip address 10.0.10.1 255.255.255.0" in lines

    def test_cisco_no_shutdown(self):
        """Cisco interfaces are brought up explicitly."""
        lines = compile_lines(Feature.VLAN, make_device(Vendor.CISCO, DeviceType.L3_SWITCH, vlan=self.VLAN))
        assert lines[-2:] == [" no shutdown", "exit"]

    def test_incomplete_vlan_skipped(self):
        """A VLAN interface without an address is skipped."""
        vlan = VLANConfig(enabled=True, vlan_interfaces=(VLANInterface(vlan_id="20"),))
        device = make_device(Vendor.HUAWEI, DeviceType.L3_SWITCH, vlan=vlan)
        assert get_compiler(Feature.VLAN).compile(device).cli == ""

    def test_packet_filter_resolves_acl(self):
        """Packet filter cites the ACL's number."""
        vlan = VLANConfig(enabled=True, vlan_interfaces=(VLANInterface(
            vlan_id="10", ip_address="10.0.10.1", subnet_mask="255.255.255.0",
            packet_filter_inbound_acl_id="a1",
        ),))
        acl = ACLsConfig(enabled=True, acls=(ACL(id="a1", number="3000", type="advanced"),))
        device = make_device(Vendor.HUAWEI, DeviceType.L3_SWITCH, vlan=vlan, acl=acl)
        assert " traffic-filter inbound acl 3000" in compile_lines(Feature.VLAN, device)

    def test_packet_filter_dangling(self):
        """A missing ACL drops the filter and leaves a note."""
        vlan = VLANConfig(enabled=True, vlan_interfaces=(VLANInterface(
            vlan_id="10", ip_address="10.0.10.1", subnet_mask="255.255.255.0",
            packet_filter_inbound_acl_id="gone",
        ),))
        output = get_compiler(Feature.VLAN).compile(make_device(Vendor.H3C, DeviceType.L3_SWITCH, vlan=vlan))
        assert "packet-filter" not in output.cli
        assert "'gone' not found" in output.explanation

    def test_dhcp_pool_binding(self):
        """H3C binds a known DHCP pool on the interface."""
        vlan = VLANConfig(enabled=True, vlan_interfaces=(VLANInterface(
            vlan_id="10", ip_address="10.0.10.1", subnet_mask="255.255.255.0",
            enable_dhcp=True, selected_pool="LAN",
        ),))
        device = make_device(Vendor.H3C, DeviceType.L3_SWITCH, vlan=vlan, dhcp=DHCP_LEASE)
        lines = compile_lines(Feature.VLAN, device)
        assert " dhcp select server" in lines
        assert " dhcp server apply ip-pool LAN" in lines

    def test_link_modes(self):
        """Access and trunk links render per vendor."""
        connections = [
            link("p1", LinkMode.ACCESS, access_vlan="10"),
            link("p2", LinkMode.TRUNK, trunk_allowed_vlans="10-12"),
        ]
        device = make_device(Vendor.HUAWEI, DeviceType.L2_SWITCH)
        lines = render_link_modes(device, get_dialect(Vendor.HUAWEI), connections)
        assert lines == [
            "interface GigabitEthernet0/0/1",
            " port link-type access",
            " port default vlan 10",
            "quit",
            "interface GigabitEthernet0/0/2",
            " port link-type trunk",
            " port trunk allow-pass vlan 10 to 12",
            "quit",
        ]

    def test_link_modes_skip_bundled_ports(self):
        """Excluded ports are left to the aggregate."""
        connections = [link("p1", LinkMode.ACCESS, access_vlan="10")]
        device = make_device(Vendor.CISCO, DeviceType.L2_SWITCH)
        lines = render_link_modes(
            device, get_dialect(Vendor.CISCO), connections, exclude=["GigabitEthernet0/0/1"]
        )
        assert lines == []

    def test_port_range_expansion(self):
        """applyToPortRange repeats the link mode on each port."""
        connections = [link("p1", LinkMode.ACCESS, access_vlan="10", apply_to_port_range="1-2")]
        lines = render_link_modes(
            make_device(Vendor.H3C, DeviceType.L2_SWITCH), get_dialect(Vendor.H3C), connections
        )
        assert lines == [
            "interface GigabitEthernet0/0/1",
            " port access vlan 10",
            "quit",
            "interface GigabitEthernet0/0/2",
            " port access vlan 10",
            "quit",
        ]

    def test_vlan_database(self):
        """VLAN ids come from interfaces and links."""
        vlan = VLANConfig(enabled=True, vlan_interfaces=(
            VLANInterface(vlan_id="10", vlan_description="users"),
        ))
        connections = [link("p1", LinkMode.TRUNK, trunk_allowed_vlans="11,12,20")]
        h3c = make_device(Vendor.H3C, DeviceType.L3_SWITCH, vlan=vlan)
        assert render_vlan_database(h3c, get_dialect(Vendor.H3C), connections) == [
            "vlan 10 to 12",
            "vlan 20",
            "vlan 10",
            " description users",
            "quit",
        ]
        huawei = make_device(Vendor.HUAWEI, DeviceType.L3_SWITCH, vlan=vlan)
        assert render_vlan_database(huawei, get_dialect(Vendor.HUAWEI), connections)[0] == "vlan batch 10 11 12 20"
        cisco = make_device(Vendor.CISCO, DeviceType.L3_SWITCH, vlan=vlan)
        assert render_vlan_database(cisco, get_dialect(Vendor.CISCO), connections)[:3] == [
            "vlan 10", " name users", "exit",
        ]


class TestACL:
    """Tests for ACLs and time ranges."""

    WEB = ACL(id="a1", number="3000", name="WEB", type="advanced", rules=(
        ACLRule(
            rule_id="5", protocol="tcp", source_is_any=False,
            source_address="10.0.0.0", source_wildcard="0.0.0.255",
            destination_port_operator="eq", destination_port1="80",
        ),
    ))

    def test_huawei_named_advanced(self):
        """Huawei named advanced ACL."""
        device = make_device(Vendor.HUAWEI, acl=ACLsConfig(enabled=True, acls=(self.WEB,)))
        assert compile_lines(Feature.ACL, device) == [
            "acl name WEB advance",
            " rule 5 permit tcp source 10.0.0.0 0.0.0.255 destination any destination-port eq 80",
            "quit",
        ]

    def test_h3c_numbered(self):
        """H3C ACL header carries number, name and match order."""
        device = make_device(Vendor.H3C, acl=ACLsConfig(enabled=True, acls=(self.WEB,)))
        lines = compile_lines(Feature.ACL, device)
        assert lines[0] == "acl number 3000 name WEB match-order config"

    def test_h3c_needs_number(self):
        """H3C skips ACLs without a number and notes it."""
        acl = ACL(id="a2", name="NONUM")
        output = get_compiler(Feature.ACL).compile(
            make_device(Vendor.H3C, acl=ACLsConfig(enabled=True, acls=(acl,)))
        )
        assert output.cli == ""
        assert "need a number" in output.explanation

    def test_cisco_standard_and_extended(self):
        """Cisco renders named standard and extended lists."""
        mgmt = ACL(id="m", name="MGMT", rules=(ACLRule(source_is_any=False, source_address="10.1.1.1"),))
        device = make_device(Vendor.CISCO, acl=ACLsConfig(enabled=True, acls=(mgmt, self.WEB)))
        lines = compile_lines(Feature.ACL, device)
        assert lines[:3] == ["ip access-list standard MGMT", " permit host 10.1.1.1", "exit"]
        assert "ip access-list extended WEB" in lines
        assert " 5 permit tcp 10.0.0.0 0.0.0.255 any eq 80" in lines

    def test_time_ranges(self):
        """Time ranges are emitted before the ACLs."""
        work = TimeRange(name="work", periodic_enabled=True, start_time="08:00",
                         end_time="18:00", days=("working-day",))
        rule = ACLRule(time_range="work")
        acl = ACL(id="a1", number="2000", rules=(rule,))
        huawei = make_device(Vendor.HUAWEI, acl=ACLsConfig(enabled=True, acls=(acl,)), time_ranges=(work,))
        lines = compile_lines(Feature.ACL, huawei)
        assert lines[0] == "time-range work 08:00 to 18:00 working-day"
        assert " rule permit source any time-range work" in lines

        cisco = make_device(Vendor.CISCO, acl=ACLsConfig(enabled=True), time_ranges=(work,))
        assert compile_lines(Feature.ACL, cisco) == [
            "time-range work",
            " periodic weekdays 08:00 to 18:00",
            "exit",
        ]

    def test_undefined_time_range(self):
        """A rule naming an undefined time range drops the clause."""
        acl = ACL(id="a1", number="2000", rules=(ACLRule(time_range="never"),))
        output = get_compiler(Feature.ACL).compile(
            make_device(Vendor.HUAWEI, acl=ACLsConfig(enabled=True, acls=(acl,)))
        )
        assert "time-range" not in output.cli
        assert "'never' is not defined" in output.explanation


class TestNAT:
    """Tests for NAT and its ACL references."""

    def test_dangling_acl_on_static_rule(self):
        """A NAT rule whose ACL is missing compiles without the ACL clause."""
        nat = NATConfig(enabled=True, static_rules=(NATStaticRule(
            local_ip="192.168.1.10", global_ip="203.0.113.10", acl_id="missing",
        ),))
        output = get_compiler(Feature.NAT).compile(make_device(Vendor.H3C, nat=nat))
        assert output.cli == "nat static outbound 192.168.1.10 203.0.113.10"
        assert "missing" not in output.cli
        assert "not found" in output.explanation

    def test_static_rule_with_acl(self):
        """A resolved ACL is cited by number."""
        nat = NATConfig(enabled=True, static_rules=(NATStaticRule(
            local_ip="192.168.1.10", global_ip="203.0.113.10", acl_id="a1",
        ),))
        acl = ACLsConfig(enabled=True, acls=(ACL(id="a1", number="3001"),))
        output = get_compiler(Feature.NAT).compile(make_device(Vendor.H3C, nat=nat, acl=acl))
        assert output.cli == "nat static outbound 192.168.1.10 203.0.113.10 acl 3001"

    def test_cisco_dynamic_overload(self):
        """Cisco easy-ip becomes interface overload."""
        rule = NATSourceRule(name="out", acl_id="a1", action="easy-ip", outside_interface="GigabitEthernet0/0")
        nat = NATConfig(enabled=True, source_rules=(rule,))
        acl = ACLsConfig(enabled=True, acls=(ACL(id="a1", name="NAT_SRC"),))
        lines = compile_lines(Feature.NAT, make_device(Vendor.CISCO, nat=nat, acl=acl))
        assert lines == ["ip nat inside source list NAT_SRC interface GigabitEthernet0/0 overload"]

    def test_cisco_dynamic_dangling(self):
        """Cisco dynamic NAT without its ACL is omitted."""
        rule = NATSourceRule(name="out", acl_id="gone", outside_interface="GigabitEthernet0/0")
        output = get_compiler(Feature.NAT).compile(
            make_device(Vendor.CISCO, nat=NATConfig(enabled=True, source_rules=(rule,)))
        )
        assert output.cli == ""
        assert "'gone' not found" in output.explanation

    def test_huawei_pool_and_policy(self):
        """Huawei address group and nat-policy rule."""
        nat = NATConfig(
            enabled=True,
            address_pools=(NATAddressPool(group_id="1", start_address="203.0.113.1", end_address="203.0.113.5"),),
            source_rules=(NATSourceRule(name="lan", action="address-group", address_group="1"),),
        )
        lines = compile_lines(Feature.NAT, make_device(Vendor.HUAWEI, DeviceType.FIREWALL, nat=nat))
        assert lines == [
            "nat address-group 1",
            " section 0 203.0.113.1 203.0.113.5",
            " mode pat",
            "quit",
            "nat-policy",
            " rule name lan",
            "  action source-nat address-group 1",
            "quit",
        ]

    def test_huawei_pool_sections_and_route(self):
        """Every section is rendered, then the pool mode and blackhole route."""
        pool = NATAddressPool(
            name="WAN",
            group_id="2",
            sections=(
                NATPoolSection("0", "203.0.113.1", "203.0.113.5"),
                NATPoolSection("1", "198.51.100.10"),
            ),
            mode="no-pat-global",
            route_enable=True,
        )
        nat = NATConfig(enabled=True, address_pools=(pool,))
        lines = compile_lines(Feature.NAT, make_device(Vendor.HUAWEI, DeviceType.FIREWALL, nat=nat))
        assert lines == [
            "nat address-group WAN 2",
            " section 0 203.0.113.1 203.0.113.5",
            " section 1 198.51.100.10",
            " mode no-pat-global",
            " route enable",
            "quit",
        ]

    def test_h3c_inbound_net_to_net(self):
        """Inbound net-to-net maps a global range onto a local network."""
        rule = NATStaticRule(
            direction="inbound", type="net-to-net",
            global_start_ip="203.0.113.1", global_end_ip="203.0.113.10",
            local_network="10.0.0.0", local_mask="255.255.255.0",
        )
        nat = NATConfig(enabled=True, static_rules=(rule,))
        lines = compile_lines(Feature.NAT, make_device(Vendor.H3C, nat=nat))
        assert lines == ["nat static inbound net-to-net 203.0.113.1 203.0.113.10 local 10.0.0.0 255.255.255.0"]

    def test_h3c_outbound_net_to_net(self):
        """Outbound net-to-net maps a local range onto a global network."""
        rule = NATStaticRule(
            type="net-to-net", local_start_ip="10.0.0.1", local_end_ip="10.0.0.10",
            global_network="203.0.113.0", global_mask="255.255.255.0",
        )
        nat = NATConfig(enabled=True, static_rules=(rule,))
        lines = compile_lines(Feature.NAT, make_device(Vendor.H3C, nat=nat))
        assert lines == ["nat static outbound net-to-net 10.0.0.1 10.0.0.10 global 203.0.113.0 255.255.255.0"]

    def test_h3c_address_group_rules(self):
        """Object-group rules list local first outbound and global first inbound."""
        groups = ObjectGroupConfig(address_groups_enabled=True, address_groups=(
            AddressGroup(name="LAN"), AddressGroup(name="PUB"),
        ))
        nat = NATConfig(enabled=True, static_rules=(
            NATStaticRule(type="address-group", local_address_group="LAN", global_address_group="PUB"),
            NATStaticRule(direction="inbound", type="address-group",
                          local_address_group="LAN", global_address_group="PUB"),
        ))
        lines = compile_lines(Feature.NAT, make_device(Vendor.H3C, nat=nat, object_groups=groups))
        assert lines == [
            "nat static outbound object-group LAN object-group PUB",
            "nat static inbound object-group PUB object-group LAN",
        ]

    def test_h3c_address_group_missing(self):
        """A rule naming an undefined object group is omitted."""
        nat = NATConfig(enabled=True, static_rules=(
            NATStaticRule(type="address-group", local_address_group="LAN", global_address_group="PUB"),
        ))
        output = get_compiler(Feature.NAT).compile(make_device(Vendor.H3C, nat=nat))
        assert output.cli == ""
        assert "object group 'LAN' not found" in output.explanation

    def test_h3c_static_enable_note(self):
        """Static rules remind about nat static enable until an interface sets it."""
        nat = NATConfig(enabled=True, static_rules=(NATStaticRule(local_ip="192.168.1.10", global_ip="203.0.113.10"),))
        output = get_compiler(Feature.NAT).compile(make_device(Vendor.H3C, nat=nat))
        assert "nat static enable" in output.explanation

        vlan = VLANConfig(enabled=True, vlan_interfaces=(VLANInterface(vlan_id="100", nat_static_enable=True),))
        output = get_compiler(Feature.NAT).compile(make_device(Vendor.H3C, nat=nat, vlan=vlan))
        assert "nat static enable" not in output.explanation

    def test_clause_explanations(self):
        """Each emitted NAT command is explained on its own line."""
        nat = NATConfig(
            enabled=True,
            address_pools=(NATAddressPool(group_id="1", start_address="203.0.113.1", end_address="203.0.113.5"),),
            source_rules=(NATSourceRule(name="lan", action="address-group", address_group="1"),),
        )
        output = get_compiler(Feature.NAT).compile(make_device(Vendor.HUAWEI, DeviceType.FIREWALL, nat=nat))
        lines = output.explanation.splitlines()
        assert "`nat address-group 1`: Creates NAT address pool '1'." in lines
        assert "`section 0 203.0.113.1 203.0.113.5`: Adds 203.0.113.1 to 203.0.113.5 to the pool." in lines
        assert "`rule name lan`: Rule 'lan' translates matching traffic using address pool '1'." in lines

    def test_huawei_subnet_match_uses_prefix(self):
        """VRP subnet matches take a prefix length, not a dotted mask."""
        rule = NATSourceRule(name="lan", source_type="subnet", source_value="10.0.0.0", source_mask="255.255.255.0")
        nat = NATConfig(enabled=True, source_rules=(rule,))
        lines = compile_lines(Feature.NAT, make_device(Vendor.HUAWEI, DeviceType.FIREWALL, nat=nat))
        assert "  source-address 10.0.0.0 24" in lines

        h3c = compile_lines(Feature.NAT, make_device(Vendor.H3C, nat=nat))
        assert "  source-ip subnet 10.0.0.0 255.255.255.0" in h3c


class TestClauseExplanations:
    """Tests for per-command explanations across features."""

    @staticmethod
    def clauses(explanation: str) -> list[str]:
        return [line for line in explanation.splitlines() if line.startswith("`")]

    def test_dhcp(self):
        """DHCP explains the global enable and the pool."""
        output = get_compiler(Feature.DHCP).compile(make_device(Vendor.HUAWEI, dhcp=DHCP_LEASE))
        clauses = self.clauses(output.explanation)
        assert clauses[0] == "`dhcp enable`: Enables the DHCP service globally."
        assert any(c.startswith("`ip pool LAN`") for c in clauses)

    def test_acl_rule(self):
        """ACL rules are described in words."""
        device = make_device(Vendor.HUAWEI, acl=ACLsConfig(enabled=True, acls=(TestACL.WEB,)))
        clauses = self.clauses(get_compiler(Feature.ACL).compile(device).explanation)
        assert clauses[0] == "`acl name WEB advance`: Creates ACL 'WEB'."
        assert clauses[1] == (
            "`rule 5 permit tcp source 10.0.0.0 0.0.0.255 destination any destination-port eq 80`: "
            "Permits tcp traffic from 10.0.0.0 wildcard 0.0.0.255 to any address, destination port eq 80."
        )

    def test_security(self):
        """Security explains the policy view and each rule."""
        security = SecurityConfig(
            policies_enabled=True,
            policies=(SecurityPolicy(name="allow", source_zone="trust", destination_zone="untrust"),),
        )
        output = get_compiler(Feature.SECURITY).compile(
            make_device(Vendor.HUAWEI, DeviceType.FIREWALL, security=security)
        )
        clauses = self.clauses(output.explanation)
        assert "`security-policy`: Enters the security policy view; rules are matched top down." in clauses
        assert any(c.startswith("`rule name allow`: Policy 'allow'") for c in clauses)

    def test_ipsec(self):
        """IPsec explains the policy entry."""
        ipsec = IPsecConfig(enabled=True, policies=(IPsecPolicy(name="VPN", seq_number="10", remote_address="198.51.100.2"),))
        output = get_compiler(Feature.IPSEC).compile(make_device(Vendor.H3C, ipsec=ipsec))
        assert (
            "`ipsec policy VPN 10 isakmp`: Creates isakmp IPsec policy 'VPN' entry 10, towards peer 198.51.100.2."
            in self.clauses(output.explanation)
        )

    def test_no_clauses_without_output(self):
        """An empty block explains nothing beyond the headline and notes."""
        ipsec = IPsecConfig(enabled=True, policies=(IPsecPolicy(name="VPN"),))
        output = get_compiler(Feature.IPSEC).compile(make_device(Vendor.H3C, ipsec=ipsec))
        assert self.clauses(output.explanation) == []


class TestSecurityAndObjectGroups:
    """Tests for firewall zones, policies and object groups."""

    def test_huawei_custom_subnet(self):
        """Huawei policy subnets are written as a prefix length."""
        security = SecurityConfig(policies_enabled=True, policies=(SecurityPolicy(
            name="lan", source_address_type="custom", source_address_value="10.0.0.0/255.255.255.0",
        ),))
        lines = compile_lines(Feature.SECURITY, make_device(Vendor.HUAWEI, DeviceType.FIREWALL, security=security))
        assert "  source-address 10.0.0.0 24" in lines

    def test_huawei_zone_and_policy(self):
        """Zones come before the security-policy block."""
        security = SecurityConfig(
            zones_enabled=True,
            policies_enabled=True,
            zones=(SecurityZone(name="trust", priority="85", interfaces=("GigabitEthernet0/0/1",)),),
            policies=(SecurityPolicy(name="allow", source_zone="trust", destination_zone="untrust"),),
        )
        lines = compile_lines(Feature.SECURITY, make_device(Vendor.HUAWEI, DeviceType.FIREWALL, security=security))
        assert lines == [
            "firewall zone name trust",
            " set priority 85",
            " add interface GigabitEthernet0/0/1",
            "quit",
            "security-policy",
            " rule name allow",
            "  source-zone trust",
            "  destination-zone untrust",
            "  action permit",
            "quit",
        ]

    def test_missing_address_group(self):
        """A policy citing an unknown group drops the match and notes it."""
        security = SecurityConfig(policies_enabled=True, policies=(SecurityPolicy(
            name="web", source_address_type="group", source_address_value="SERVERS",
        ),))
        output = get_compiler(Feature.SECURITY).compile(
            make_device(Vendor.H3C, DeviceType.FIREWALL, security=security)
        )
        assert "SERVERS" not in output.cli
        assert "'SERVERS' not found" in output.explanation
        assert "  action pass" in output.cli.splitlines()

    def test_compound_enable(self):
        """Object groups are enabled by any of their toggles."""
        assert not ObjectGroupConfig().is_enabled
        assert ObjectGroupConfig(domain_groups_enabled=True).is_enabled
        assert SecurityConfig(policies_enabled=True).is_enabled

    def test_h3c_address_group(self):
        """H3C address groups number their members from 1."""
        groups = ObjectGroupConfig(address_groups_enabled=True, address_groups=(AddressGroup(
            name="SERVERS",
            members=(
                AddressMember(address="10.0.0.1"),
                AddressMember(address="10.0.1.0", mask="255.255.255.0"),
            ),
        ),))
        lines = compile_lines(Feature.OBJECT_GROUPS, make_device(Vendor.H3C, DeviceType.FIREWALL, object_groups=groups))
        assert lines == [
            "object-group ip address SERVERS",
            " 1 network host address 10.0.0.1",
            " 2 network subnet 10.0.1.0 255.255.255.0",
            "quit",
        ]


class TestSwitching:
    """Tests for link aggregation, STP, port isolation and stacking."""

    def test_lacp_modes(self):
        """LACP vocabulary from every vendor is recognised."""
        assert uses_lacp("dynamic")
        assert uses_lacp("LACP")
        assert not uses_lacp("static")
        assert not uses_lacp("")

    def test_member_auto_detect(self):
        """Members come from wired ports when none are listed."""
        device = make_device(Vendor.HUAWEI, DeviceType.L3_SWITCH)
        members = detect_link_aggregation_members(device, [link("p1"), link("p2"), link("p1")])
        assert [m.name for m in members] == ["GigabitEthernet0/0/1", "GigabitEthernet0/0/2"]

    def test_huawei_eth_trunk(self):
        """Huawei LACP aggregate with detected members."""
        lag = LinkAggregationConfig(enabled=True, group_id="1", mode="lacp")
        device = make_device(Vendor.HUAWEI, DeviceType.L3_SWITCH, link_aggregation=lag)
        output = get_compiler(Feature.LINK_AGGREGATION).compile(device, [link("p1"), link("p2")])
        lines = output.cli.splitlines()
        assert lines[:3] == ["interface Eth-Trunk1", " mode lacp-static", "quit"]
        assert ["interface GigabitEthernet0/0/1", " eth-trunk 1", "quit"] == lines[3:6]
        assert "detected from topology" in output.explanation

    def test_bundled_ports_only_when_enabled(self):
        """Disabled aggregation owns no ports."""
        lag = LinkAggregationConfig(enabled=False, members=(LinkAggregationMember(name="Gi1"),))
        device = make_device(Vendor.CISCO, DeviceType.L3_SWITCH, link_aggregation=lag)
        assert bundled_port_names(device, []) == []

    def test_cisco_static_channel(self):
        """Static bundles use channel-group mode on."""
        lag = LinkAggregationConfig(
            enabled=True, group_id="2", mode="static",
            members=(LinkAggregationMember(name="GigabitEthernet1/0/1"),),
        )
        lines = compile_lines(
            Feature.LINK_AGGREGATION, make_device(Vendor.CISCO, DeviceType.L3_SWITCH, link_aggregation=lag)
        )
        assert "interface Port-channel2" in lines
        assert " channel-group 2 mode on" in lines

    def test_stp_modes(self):
        """STP mode maps per vendor; VRP falls back from PVST."""
        cisco = compile_lines(
            Feature.STP, make_device(Vendor.CISCO, DeviceType.L2_SWITCH, stp=STPConfig(enabled=True, mode="rstp"))
        )
        assert cisco[0] == "spanning-tree mode rapid-pvst"

        output = get_compiler(Feature.STP).compile(
            make_device(Vendor.HUAWEI, DeviceType.L2_SWITCH, stp=STPConfig(enabled=True, mode="pvst"))
        )
        assert output.cli.splitlines()[0] == "stp mode rstp"
        assert "no PVST" in output.explanation

    def test_stp_port_on_bundled_member(self):
        """Port settings on an aggregation member move to the aggregate."""
        lag = LinkAggregationConfig(
            enabled=True, group_id="1",
            members=(LinkAggregationMember(name="GigabitEthernet0/0/1"),),
        )
        stp = STPConfig(enabled=True, port_configs=(
            STPPortConfig(interface_name="GigabitEthernet0/0/1", edge_port=True),
        ))
        device = make_device(Vendor.HUAWEI, DeviceType.L2_SWITCH, stp=stp, link_aggregation=lag)
        lines = compile_lines(Feature.STP, device)
        assert lines[1:] == ["interface Eth-Trunk1", " stp edged-port enable", "quit"]

    def test_cisco_protected_ports(self):
        """Cisco isolation uses protected ports."""
        isolation = PortIsolationConfig(enabled=True, groups=(
            PortIsolationGroup(group_id="1", interfaces=("GigabitEthernet1/0/1",)),
        ))
        lines = compile_lines(
            Feature.PORT_ISOLATION, make_device(Vendor.CISCO, DeviceType.L2_SWITCH, port_isolation=isolation)
        )
        assert lines == ["interface GigabitEthernet1/0/1", " switchport protected", "exit"]

    def test_renumber_interface(self):
        """Interfaces move to the new member slot."""
        assert renumber_interface("Ten-GigabitEthernet1/0/49", "1", "2") == "Ten-GigabitEthernet2/0/49"
        assert renumber_interface("Ten-GigabitEthernet3/0/49", "1", "2") == "Ten-GigabitEthernet3/0/49"
        assert renumber_interface("Ten-GigabitEthernet1/0/49", "1", "") == "Ten-GigabitEthernet1/0/49"

    def test_h3c_irf_reboot_last(self):
        """The IRF mode switch is the last command."""
        stacking = StackingConfig(enabled=True, domain_id="10", members=(StackMember(
            member_id="1", priority="32",
            stack_ports=(StackPort(port_id="1", port_group=("Ten-GigabitEthernet1/0/49",)),),
        ),))
        output = get_compiler(Feature.STACKING).compile(
            make_device(Vendor.H3C, DeviceType.L3_SWITCH, stacking=stacking)
        )
        lines = output.cli.splitlines()
        assert "irf member 1 priority 32" in lines
        assert "irf-port 1" in lines
        assert " port group interface Ten-GigabitEthernet1/0/49" in lines
        assert lines[-2:] == ["chassis convert mode irf", "Y"]
        assert "reboots" in output.explanation

    def test_cisco_stack_limit(self):
        """StackWise Virtual keeps the first two members."""
        stacking = StackingConfig(enabled=True, members=tuple(
            StackMember(member_id=str(i), priority="10") for i in (1, 2, 3)
        ))
        output = get_compiler(Feature.STACKING).compile(
            make_device(Vendor.CISCO, DeviceType.L3_SWITCH, stacking=stacking)
        )
        assert "switch 3 priority 10" not in output.cli
        assert "switch 2 priority 10" in output.cli
        assert "ignored" in output.explanation


class TestRoutingAndReliability:
    """Tests for routing, VRRP, HA and SSH."""

    def test_static_routes(self):
        """Static routes per vendor."""
        routing = RoutingConfig(static_routes=(StaticRoute(
            network="0.0.0.0", subnet_mask="0.0.0.0", next_hop="10.0.0.254", admin_distance="10",
        ),))
        assert compile_lines(Feature.ROUTING, make_device(Vendor.CISCO, routing=routing)) == [
            "ip route 0.0.0.0 0.0.0.0 10.0.0.254 10",
        ]
        assert compile_lines(Feature.ROUTING, make_device(Vendor.H3C, routing=routing)) == [
            "ip route-static 0.0.0.0 0.0.0.0 10.0.0.254 preference 10",
        ]

    def test_vrrp_on_vlan(self):
        """VRRP groups attach to the VLAN interface."""
        vrrp = VRRPConfig(enabled=True, interfaces=(VRRPInterface(vlan_id="10", groups=(
            VRRPGroup(group_id="1", virtual_ip="10.0.10.254", priority="120"),
        )),))
        lines = compile_lines(Feature.VRRP, make_device(Vendor.HUAWEI, DeviceType.L3_SWITCH, vrrp=vrrp))
        assert lines == [
            "interface Vlanif10",
            " vrrp vrid 1 virtual-ip 10.0.10.254",
            " vrrp vrid 1 priority 120",
            " vrrp vrid 1 preempt-mode timer delay 0",
            "quit",
        ]

    def test_huawei_hrp(self):
        """Huawei HA ends with the device role and hrp enable."""
        ha = HAConfig(enabled=True, device_role="secondary")
        lines = compile_lines(Feature.HA, make_device(Vendor.HUAWEI, DeviceType.FIREWALL, ha=ha))
        assert lines[-2:] == ["hrp device standby", "hrp enable"]

    def test_ssh_h3c(self):
        """H3C SSH with a local user."""
        ssh = SSHConfig(enabled=True, users=(SSHUser(username="admin", password="secret"),))
        lines = compile_lines(Feature.SSH, make_device(Vendor.H3C, ssh=ssh))
        assert lines[0] == "ssh server enable"
        assert "local-user admin class manage" in lines
        assert lines[-5:] == [
            "line vty 0 4",
            " authentication-mode scheme",
            " user-role network-admin",
            " protocol inbound ssh",
            "quit",
        ]

    def test_ssh_cisco_without_domain(self):
        """Missing domain name is noted for Cisco."""
        output = get_compiler(Feature.SSH).compile(make_device(Vendor.CISCO, ssh=SSHConfig(enabled=True)))
        assert "crypto key generate rsa modulus 2048" in output.cli
        assert "domain name" in output.explanation


class TestVPN:
    """Tests for GRE and IPsec."""

    def test_gre_default_source(self):
        """A tunnel without a source uses the first wired port."""
        gre = GREConfig(enabled=True, tunnels=(GRETunnel(
            tunnel_number="0", ip_address="172.16.0.1", mask="255.255.255.252", destination_address="198.51.100.2",
        ),))
        output = get_compiler(Feature.GRE).compile(make_device(Vendor.HUAWEI, gre=gre), [link("p2")])
        lines = output.cli.splitlines()
        assert lines[0] == "interface Tunnel0"
        assert " tunnel-protocol gre" in lines
        assert " source GigabitEthernet0/0/2" in lines
        assert "using connected port" in output.explanation

    def test_ipsec_dangling_transform_set(self):
        """A missing transform set is omitted and the policy kept."""
        ipsec = IPsecConfig(
            enabled=True,
            transform_sets=(IPsecTransformSet(id="t1", name="TS1", esp_encryption="aes-cbc-128", esp_auth="sha1"),),
            policies=(IPsecPolicy(name="VPN", seq_number="10", transform_set_ids=("t1", "t9")),),
        )
        output = get_compiler(Feature.IPSEC).compile(make_device(Vendor.H3C, ipsec=ipsec))
        lines = output.cli.splitlines()
        assert "ipsec policy VPN 10 isakmp" in lines
        assert " transform-set TS1" in lines
        assert "'t9' not found" in output.explanation

    def test_ipsec_incomplete_policy_skipped(self):
        """A policy without a sequence number is skipped."""
        ipsec = IPsecConfig(enabled=True, policies=(IPsecPolicy(name="VPN"),))
        assert get_compiler(Feature.IPSEC).compile(make_device(Vendor.H3C, ipsec=ipsec)).cli == ""


class TestWireless:
    """Tests for WLAN configuration."""

    def test_h3c_service_template(self):
        """H3C service template with PSK."""
        wireless = WirelessConfig(enabled=True, service_templates=(ServiceTemplate(
            template_name="staff", ssid="Staff", psk_password="password123",
        ),))
        lines = compile_lines(
            Feature.WIRELESS, make_device(Vendor.H3C, DeviceType.ACCESS_CONTROLLER, wireless=wireless)
        )
        assert lines == [
            'wlan service-template "staff"',
            ' ssid "Staff"',
            " akm mode psk",
            " preshared-key pass-phrase simple password123",
            " security-ie rsn",
            " cipher-suite ccmp",
            " service-template enable",
            "quit",
        ]

    def test_h3c_unknown_template_in_group(self):
        """An AP group naming an unknown template notes it."""
        wireless = WirelessConfig(
            enabled=True,
            ap_devices=(APDevice(ap_name="ap1", serial_number="SN1", model="WA6320", group_name="floor1"),),
            ap_groups=(APGroup(group_name="floor1", service_templates=("ghost",)),),
        )
        output = get_compiler(Feature.WIRELESS).compile(
            make_device(Vendor.H3C, DeviceType.ACCESS_CONTROLLER, wireless=wireless)
        )
        assert 'wlan ap "ap1" model "WA6320"' in output.cli
        assert ' ap "ap1"' in output.cli
        assert "'ghost' not found" in output.explanation

    def test_huawei_without_source_interface(self):
        """Huawei WLAN notes a missing AC source interface."""
        output = get_compiler(Feature.WIRELESS).compile(
            make_device(Vendor.HUAWEI, DeviceType.ACCESS_CONTROLLER, wireless=WirelessConfig(enabled=True))
        )
        assert output.cli.splitlines()[0] == "wlan"
        assert "no AC source interface" in output.explanation
