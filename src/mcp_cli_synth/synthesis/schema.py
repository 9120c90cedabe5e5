"""Schema definitions for the synthesis subsystem.

Every block is a frozen dataclass and every collection is a tuple, so an edit
always produces a new value and "did this slice change" is a reference check.
Numeric fields are carried as text and emitted verbatim.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Vendor(str, Enum):
    """Device vendor, selects the command dialect."""
    CISCO = "Cisco"
    HUAWEI = "Huawei"
    H3C = "H3C"
    GENERIC = "Generic"


class DeviceType(str, Enum):
    """Role of a device in the topology."""
    ROUTER = "Router"
    L3_SWITCH = "L3 Switch"
    L2_SWITCH = "L2 Switch"
    FIREWALL = "Firewall"
    ACCESS_POINT = "Access Point"
    ACCESS_CONTROLLER = "Access Controller"
    PC = "PC"
    SERVER = "Server"


class Feature(str, Enum):
    """Independently toggleable configuration sections."""
    DHCP = "DHCP"
    DHCP_RELAY = "DHCP Relay"
    DHCP_SNOOPING = "DHCP Snooping"
    VLAN = "VLAN"
    INTERFACE = "Interface"
    LINK_AGGREGATION = "Link Aggregation"
    PORT_ISOLATION = "Port Isolation"
    STACKING = "Stacking (IRF)"
    MLAG = "M-LAG"
    STP = "STP"
    ROUTING = "Routing"
    VRRP = "VRRP"
    WIRELESS = "Wireless"
    ACL = "ACL"
    NAT = "NAT"
    SSH = "SSH"
    SECURITY = "Security"
    OBJECT_GROUPS = "Object Groups"
    IPSEC = "IPsec"
    HA = "HA"
    GRE = "GRE VPN"

    @property
    def key(self) -> str:
        """Attribute name of this feature's block on Configuration."""
        return FEATURE_KEYS[self]


FEATURE_KEYS: dict[Feature, str] = {
    Feature.DHCP: "dhcp",
    Feature.DHCP_RELAY: "dhcp_relay",
    Feature.DHCP_SNOOPING: "dhcp_snooping",
    Feature.VLAN: "vlan",
    Feature.INTERFACE: "interface_ip",
    Feature.LINK_AGGREGATION: "link_aggregation",
    Feature.PORT_ISOLATION: "port_isolation",
    Feature.STACKING: "stacking",
    Feature.MLAG: "mlag",
    Feature.STP: "stp",
    Feature.ROUTING: "routing",
    Feature.VRRP: "vrrp",
    Feature.WIRELESS: "wireless",
    Feature.ACL: "acl",
    Feature.NAT: "nat",
    Feature.SSH: "ssh",
    Feature.SECURITY: "security",
    Feature.OBJECT_GROUPS: "object_groups",
    Feature.IPSEC: "ipsec",
    Feature.HA: "ha",
    Feature.GRE: "gre",
}


class LinkMode(str, Enum):
    """Switchport mode of a physical link end."""
    UNCONFIGURED = "unconfigured"
    ACCESS = "access"
    TRUNK = "trunk"
    L3 = "l3"


# --- Compiler output ---

@dataclass(frozen=True)
class FeatureOutput:
    """Compiled command text and its explanation for one feature."""
    cli: str = ""
    explanation: str = ""

    @property
    def empty(self) -> bool:
        return not self.cli.strip()


EMPTY_OUTPUT = FeatureOutput()
FAILED_CLI = "# generation failed"


def failure_output(feature: Feature) -> FeatureOutput:
    """Placeholder written when a feature's compiler raises."""
    return FeatureOutput(FAILED_CLI, f"{feature.value} failed to generate")


@dataclass(frozen=True)
class FeatureBlock:
    """Base for every feature block.

    ``cli`` and ``explanation`` cache the last compiled output and are only
    ever written by the compiler path.
    """
    cli: str = ""
    explanation: str = ""

    # Compound blocks are enabled by an OR of several sub-toggles
    compound = False

    @property
    def is_enabled(self) -> bool:
        return bool(getattr(self, "enabled", False))


# --- DHCP ---

@dataclass(frozen=True)
class DHCPStaticBinding:
    ip_address: str = ""
    mac_address: str = ""


@dataclass(frozen=True)
class DHCPPool:
    """A DHCP server address pool."""
    pool_name: str = ""
    network: str = ""
    subnet_mask: str = ""
    gateway: str = ""
    dns_server: str = ""
    option43: str = ""
    exclude_start: str = ""
    exclude_end: str = ""
    lease_days: str = ""
    lease_hours: str = ""
    lease_minutes: str = ""
    lease_seconds: str = ""
    static_bindings: tuple[DHCPStaticBinding, ...] = ()


@dataclass(frozen=True)
class DHCPConfig(FeatureBlock):
    enabled: bool = False
    pools: tuple[DHCPPool, ...] = ()


@dataclass(frozen=True)
class DHCPRelayServer:
    ip: str = ""
    vpn_instance: str = ""


@dataclass(frozen=True)
class DHCPOption82:
    """H3C relay option 82 handling."""
    enabled: bool = False
    strategy: str = "replace"  # drop, keep, replace
    circuit_id_format: str = "normal"  # normal, verbose, string
    circuit_id_string: str = ""
    remote_id_format: str = "normal"  # normal, string, sysname
    remote_id_string: str = ""


@dataclass(frozen=True)
class HuaweiRelayOptions:
    source_ip_address: str = ""
    gateway: str = ""
    option82_enabled: bool = False
    option82_strategy: str = "replace"
    insert_vss_control: bool = False
    insert_link_selection: bool = False
    insert_server_id_override: bool = False


@dataclass(frozen=True)
class DHCPRelayInterface:
    interface_name: str = ""
    server_addresses: tuple[DHCPRelayServer, ...] = ()
    option82: DHCPOption82 = field(default_factory=DHCPOption82)
    huawei: HuaweiRelayOptions = field(default_factory=HuaweiRelayOptions)


@dataclass(frozen=True)
class DHCPRelaySecurity:
    client_info_recording: bool = False
    client_info_refresh: bool = False
    client_info_refresh_type: str = "auto"  # auto, interval
    client_info_refresh_interval: str = ""
    mac_check: bool = False
    mac_check_aging_time: str = ""


@dataclass(frozen=True)
class DHCPRelayConfig(FeatureBlock):
    enabled: bool = False
    security: DHCPRelaySecurity = field(default_factory=DHCPRelaySecurity)
    dscp: str = ""
    interfaces: tuple[DHCPRelayInterface, ...] = ()
    server_match_check: bool = True  # Huawei
    reply_forward_all: bool = False  # Huawei
    trust_option82: bool = True  # Huawei


@dataclass(frozen=True)
class DHCPSnoopingInterface:
    interface_name: str = ""
    trust: bool = False
    binding_record: bool = False  # H3C


@dataclass(frozen=True)
class DHCPSnoopingConfig(FeatureBlock):
    enabled: bool = False
    interfaces: tuple[DHCPSnoopingInterface, ...] = ()
    enabled_on_vlans: str = ""  # Huawei and Cisco
    binding_database_enabled: bool = False
    binding_database_filename: str = ""
    binding_database_interval: str = ""


# --- Interfaces ---

@dataclass(frozen=True)
class L3InterfaceOptions:
    """Options shared by VLAN interfaces and routed physical interfaces."""
    ip_address: str = ""
    subnet_mask: str = ""
    enable_dhcp: bool = False
    dhcp_mode: str = "global"  # global, interface
    selected_pool: str = ""
    packet_filter_inbound_acl_id: str = ""
    packet_filter_outbound_acl_id: str = ""
    ipsec_policy_id: str = ""
    nat_static_enable: bool = False
    huawei_nat_enable: bool = False
    nat_hairpin_enable: bool = False


@dataclass(frozen=True)
class VLANInterface(L3InterfaceOptions):
    vlan_id: str = ""
    vlan_description: str = ""
    interface_description: str = ""


@dataclass(frozen=True)
class VLANConfig(FeatureBlock):
    enabled: bool = False
    vlan_interfaces: tuple[VLANInterface, ...] = ()


@dataclass(frozen=True)
class PhysicalInterface(L3InterfaceOptions):
    interface_name: str = ""
    description: str = ""


@dataclass(frozen=True)
class InterfaceIPConfig(FeatureBlock):
    enabled: bool = False
    interfaces: tuple[PhysicalInterface, ...] = ()


# --- L2 switching ---

@dataclass(frozen=True)
class LinkAggregationMember:
    name: str = ""
    lacp_mode: str = "active"  # active, passive (H3C)
    lacp_period: str = "long"  # short, long (H3C)
    port_priority: str = ""


@dataclass(frozen=True)
class LinkAggregationConfig(FeatureBlock):
    enabled: bool = False
    group_id: str = "1"
    mode: str = ""
    members: tuple[LinkAggregationMember, ...] = ()
    system_priority: str = ""
    load_balance_algorithm: str = ""
    description: str = ""
    interface_mode: LinkMode = LinkMode.UNCONFIGURED
    access_vlan: str = ""
    trunk_native_vlan: str = ""
    trunk_allowed_vlans: str = ""
    preempt_enabled: bool = False  # Huawei
    preempt_delay: str = ""
    timeout: str = ""  # fast, slow
    huawei_lacp_priority_mode: str = "default"  # default, system-priority


@dataclass(frozen=True)
class PortIsolationGroup:
    group_id: str = ""
    interfaces: tuple[str, ...] = ()
    community_vlans: str = ""  # H3C


@dataclass(frozen=True)
class PortIsolationConfig(FeatureBlock):
    enabled: bool = False
    mode: str = "l2"  # l2, all (Huawei)
    excluded_vlans: str = ""  # Huawei
    groups: tuple[PortIsolationGroup, ...] = ()


@dataclass(frozen=True)
class StackPort:
    port_id: str = ""
    port_group: tuple[str, ...] = ()


@dataclass(frozen=True)
class StackMember:
    member_id: str = ""
    new_member_id: str = ""
    priority: str = ""
    stack_ports: tuple[StackPort, ...] = ()


@dataclass(frozen=True)
class StackingConfig(FeatureBlock):
    enabled: bool = False
    model_type: str = "new"  # new, old (H3C)
    domain_id: str = ""
    members: tuple[StackMember, ...] = ()


@dataclass(frozen=True)
class MLAGInterface:
    aggregate_id: str = ""
    group_id: str = ""
    mode: str = "dual-active"  # Huawei: dual-active, active-standby


@dataclass(frozen=True)
class MLAGConfig(FeatureBlock):
    enabled: bool = False
    system_mac: str = ""
    system_number: str = ""
    system_priority: str = ""
    role_priority: str = ""
    standalone_enabled: bool = False
    standalone_delay: str = ""
    peer_link_id: str = ""
    interfaces: tuple[MLAGInterface, ...] = ()
    keepalive_enabled: bool = False
    keepalive_destination_ip: str = ""
    keepalive_source_ip: str = ""
    keepalive_udp_port: str = ""
    keepalive_vpn_instance: str = ""
    keepalive_interval: str = ""
    keepalive_timeout: str = ""
    mad_default_action: str = "down"
    dfs_group_id: str = "1"  # Huawei
    dfs_group_priority: str = ""
    authentication_password: str = ""


@dataclass(frozen=True)
class MSTPInstance:
    instance_id: str = ""
    vlan_list: str = ""
    priority: str = ""
    root_bridge: str = "none"  # none, primary, secondary


@dataclass(frozen=True)
class STPPortConfig:
    interface_name: str = ""
    port_priority: str = ""
    path_cost: str = ""
    edge_port: bool = False
    bpdu_guard: bool = False


@dataclass(frozen=True)
class STPConfig(FeatureBlock):
    enabled: bool = False
    mode: str = "rstp"  # stp, rstp, pvst, mstp
    priority: str = ""
    root_bridge: str = "none"
    region_name: str = ""
    revision_level: str = ""
    mstp_instances: tuple[MSTPInstance, ...] = ()
    port_configs: tuple[STPPortConfig, ...] = ()


# --- Routing and reliability ---

@dataclass(frozen=True)
class StaticRoute:
    network: str = ""
    subnet_mask: str = ""
    next_hop: str = ""
    admin_distance: str = ""


@dataclass(frozen=True)
class OSPFNetwork:
    network: str = ""
    wildcard_mask: str = ""


@dataclass(frozen=True)
class OSPFArea:
    area_id: str = ""
    area_type: str = "standard"  # standard, stub, nssa
    no_summary: bool = False
    default_cost: str = ""
    networks: tuple[OSPFNetwork, ...] = ()


@dataclass(frozen=True)
class OSPFInterface:
    interface_name: str = ""
    priority: str = ""
    vlan_id: str = ""


@dataclass(frozen=True)
class OSPFConfig:
    enabled: bool = False
    process_id: str = "1"
    router_id: str = ""
    areas: tuple[OSPFArea, ...] = ()
    redistribute_static: bool = False
    redistribute_connected: bool = False
    default_route: bool = False
    interface_configs: tuple[OSPFInterface, ...] = ()


@dataclass(frozen=True)
class RoutingConfig(FeatureBlock):
    static_routes: tuple[StaticRoute, ...] = ()
    ospf: OSPFConfig = field(default_factory=OSPFConfig)

    @property
    def is_enabled(self) -> bool:
        return bool(self.static_routes) or self.ospf.enabled


@dataclass(frozen=True)
class VRRPGroup:
    group_id: str = ""
    virtual_ip: str = ""
    priority: str = ""
    preempt: bool = True
    preempt_delay: str = ""
    auth_type: str = "none"  # none, simple, md5
    auth_key: str = ""
    advertisement_interval: str = ""
    description: str = ""


@dataclass(frozen=True)
class VRRPInterface:
    interface_name: str = ""
    vlan_id: str = ""
    groups: tuple[VRRPGroup, ...] = ()


@dataclass(frozen=True)
class VRRPConfig(FeatureBlock):
    enabled: bool = False
    interfaces: tuple[VRRPInterface, ...] = ()


@dataclass(frozen=True)
class TrackItem:
    track_id: str = ""
    type: str = "interface"
    value: str = ""


@dataclass(frozen=True)
class HeartbeatInterface:
    interface_name: str = ""
    remote_ip: str = ""
    heartbeat_only: bool = False


@dataclass(frozen=True)
class HAConfig(FeatureBlock):
    enabled: bool = False
    device_role: str = "primary"  # primary, secondary
    work_mode: str = "active-standby"  # active-standby, dual-active
    local_ip: str = ""
    remote_ip: str = ""
    port: str = ""
    keepalive_interval: str = ""
    keepalive_count: str = ""
    data_channel_interface: str = ""
    hot_backup_enabled: bool = True
    auto_sync_enabled: bool = True
    sync_check_enabled: bool = False
    failback_enabled: bool = False
    failback_delay: str = ""
    track_items: tuple[TrackItem, ...] = ()
    heartbeat_interfaces: tuple[HeartbeatInterface, ...] = ()  # Huawei
    authentication_key: str = ""
    checksum_enabled: bool = False
    encryption_enabled: bool = False
    hello_interval: str = ""


# --- Security ---

@dataclass(frozen=True)
class TimeRange:
    """A named schedule referenced by ACL rules and security policies."""
    name: str = ""
    periodic_enabled: bool = False
    start_time: str = ""
    end_time: str = ""
    days: tuple[str, ...] = ()  # daily, working-day, off-day or weekday names
    absolute_enabled: bool = False
    from_time: str = ""
    from_date: str = ""
    to_time: str = ""
    to_date: str = ""


@dataclass(frozen=True)
class ACLRule:
    """One ACL rule; advanced-only fields are ignored for basic ACLs."""
    action: str = "permit"
    rule_id: str = ""
    description: str = ""
    protocol: str = "ip"
    source_is_any: bool = True
    source_address: str = ""
    source_wildcard: str = ""
    destination_is_any: bool = True
    destination_address: str = ""
    destination_wildcard: str = ""
    source_port_operator: str = ""
    source_port1: str = ""
    source_port2: str = ""
    destination_port_operator: str = ""
    destination_port1: str = ""
    destination_port2: str = ""
    icmp_type: str = ""
    icmp_code: str = ""
    dscp: str = ""
    precedence: str = ""
    tos: str = ""
    established: bool = False
    tcp_flags: tuple[str, ...] = ()
    time_range: str = ""
    vpn_instance: str = ""
    fragment: bool = False
    logging: bool = False
    counting: bool = False


@dataclass(frozen=True)
class ACL:
    id: str = ""
    number: str = ""
    name: str = ""
    description: str = ""
    type: str = "basic"  # basic, advanced
    match_order: str = "config"  # auto, config
    step: str = ""
    rules: tuple[ACLRule, ...] = ()


@dataclass(frozen=True)
class ACLsConfig(FeatureBlock):
    enabled: bool = False
    acls: tuple[ACL, ...] = ()


@dataclass(frozen=True)
class AddressMember:
    type: str = "ip-mask"  # ip-mask, range, host-name
    address: str = ""
    mask: str = ""
    start_address: str = ""
    end_address: str = ""
    host_name: str = ""


@dataclass(frozen=True)
class AddressGroup:
    name: str = ""
    description: str = ""
    members: tuple[AddressMember, ...] = ()


@dataclass(frozen=True)
class ServiceMember:
    protocol: str = "tcp"  # tcp, udp, icmp, custom
    custom_protocol_number: str = ""
    source_port_operator: str = ""
    source_port1: str = ""
    source_port2: str = ""
    destination_port_operator: str = ""
    destination_port1: str = ""
    destination_port2: str = ""
    icmp_type: str = ""
    icmp_code: str = ""


@dataclass(frozen=True)
class ServiceGroup:
    name: str = ""
    description: str = ""
    members: tuple[ServiceMember, ...] = ()


@dataclass(frozen=True)
class DomainGroup:
    name: str = ""
    description: str = ""
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class ObjectGroupConfig(FeatureBlock):
    address_groups_enabled: bool = False
    service_groups_enabled: bool = False
    domain_groups_enabled: bool = False
    address_groups: tuple[AddressGroup, ...] = ()
    service_groups: tuple[ServiceGroup, ...] = ()
    domain_groups: tuple[DomainGroup, ...] = ()

    compound = True

    @property
    def is_enabled(self) -> bool:
        return (
            self.address_groups_enabled or
            self.service_groups_enabled or
            self.domain_groups_enabled
        )


@dataclass(frozen=True)
class SecurityZone:
    name: str = ""
    priority: str = ""
    description: str = ""
    interfaces: tuple[str, ...] = ()


@dataclass(frozen=True)
class SecurityPolicy:
    name: str = ""
    description: str = ""
    action: str = "permit"
    source_zone: str = ""
    destination_zone: str = ""
    source_address_type: str = "any"  # any, custom, group
    source_address_value: str = ""
    destination_address_type: str = "any"
    destination_address_value: str = ""
    service_type: str = "any"
    service_value: str = ""
    time_range: str = ""
    logging: bool = False
    counting: bool = False
    enabled: bool = True


@dataclass(frozen=True)
class SecurityConfig(FeatureBlock):
    zones_enabled: bool = False
    policies_enabled: bool = False
    zones: tuple[SecurityZone, ...] = ()
    policies: tuple[SecurityPolicy, ...] = ()

    compound = True

    @property
    def is_enabled(self) -> bool:
        return self.zones_enabled or self.policies_enabled


# --- NAT ---

@dataclass(frozen=True)
class NATPoolSection:
    section_id: str = ""
    start_address: str = ""
    end_address: str = ""


@dataclass(frozen=True)
class NATAddressPool:
    """Source NAT pool.

    A pool is either one range (``start_address``/``end_address``) or a list of
    ``sections``. Huawei renders every section; Cisco pools hold one range.
    """
    group_id: str = ""
    name: str = ""
    start_address: str = ""
    end_address: str = ""
    netmask: str = ""  # Cisco pools need one
    sections: tuple[NATPoolSection, ...] = ()
    mode: str = ""  # Huawei, overrides NATConfig.pool_mode
    route_enable: bool = False  # Huawei blackhole route for the pool

    @property
    def address_ranges(self) -> tuple[NATPoolSection, ...]:
        """Usable ranges, with the single-range fields as section 0."""
        if self.sections:
            return tuple(s for s in self.sections if s.start_address)
        if self.start_address:
            return (NATPoolSection("0", self.start_address, self.end_address or self.start_address),)
        return ()


@dataclass(frozen=True)
class NATStaticRule:
    """Static translation.

    Outbound net-to-net maps a local range onto a global network; inbound
    maps a global range onto a local network.
    """
    direction: str = "outbound"  # outbound, inbound
    type: str = "one-to-one"  # one-to-one, net-to-net, address-group
    local_ip: str = ""
    global_ip: str = ""
    local_start_ip: str = ""
    local_end_ip: str = ""
    global_network: str = ""
    global_mask: str = ""
    global_start_ip: str = ""
    global_end_ip: str = ""
    local_network: str = ""
    local_mask: str = ""
    local_address_group: str = ""
    global_address_group: str = ""
    acl_id: str = ""
    reversible: bool = False


@dataclass(frozen=True)
class NATServerGroupMember:
    ip: str = ""
    port: str = ""
    weight: str = ""


@dataclass(frozen=True)
class NATServerGroup:
    group_id: str = ""
    members: tuple[NATServerGroupMember, ...] = ()


@dataclass(frozen=True)
class NATPortMapping:
    """Internal server published on an interface."""
    interface_name: str = ""
    policy_name: str = ""
    mapping_type: str = "single"  # single, port-range, acl, load-balance
    protocol: str = "tcp"
    global_address_type: str = "ip"  # ip, interface
    global_address: str = ""
    global_port: str = ""
    global_end_port: str = ""
    local_address: str = ""
    local_port: str = ""
    local_end_port: str = ""
    server_group_id: str = ""
    acl_id: str = ""
    reversible: bool = False


@dataclass(frozen=True)
class NATSourceRule:
    """Source NAT policy rule (Huawei nat-policy, H3C global-policy, Cisco dynamic)."""
    name: str = ""
    description: str = ""
    enabled: bool = True
    source_zone: str = ""
    destination_zone: str = ""
    source_type: str = "any"  # any, object-group, subnet, host, acl
    source_value: str = ""
    source_mask: str = ""
    destination_type: str = "any"
    destination_value: str = ""
    destination_mask: str = ""
    acl_id: str = ""
    action: str = "easy-ip"  # easy-ip, address-group, no-pat, no-nat
    address_group: str = ""
    outside_interface: str = ""
    port_preserved: bool = False
    counting: bool = False


@dataclass(frozen=True)
class NATServer:
    """Huawei nat server mapping."""
    name: str = ""
    zone: str = ""
    protocol: str = "any"
    global_address: str = ""
    global_address_end: str = ""
    global_interface: str = ""
    global_port: str = ""
    inside_address: str = ""
    inside_address_end: str = ""
    inside_port: str = ""
    no_reverse: bool = False
    route: bool = False
    disabled: bool = False
    description: str = ""


@dataclass(frozen=True)
class NATConfig(FeatureBlock):
    enabled: bool = False
    address_pools: tuple[NATAddressPool, ...] = ()
    static_rules: tuple[NATStaticRule, ...] = ()
    server_groups: tuple[NATServerGroup, ...] = ()
    port_mappings: tuple[NATPortMapping, ...] = ()
    source_rules: tuple[NATSourceRule, ...] = ()
    servers: tuple[NATServer, ...] = ()
    pool_mode: str = "pat"  # Huawei: pat, no-pat-global, no-pat-local


# --- VPN ---

@dataclass(frozen=True)
class IPsecTransformSet:
    id: str = ""
    name: str = ""
    protocol: str = "esp"  # esp, ah, ah-esp
    encapsulation_mode: str = "tunnel"  # tunnel, transport, auto
    esp_encryption: str = ""
    esp_auth: str = ""
    ah_auth: str = ""
    pfs: str = ""


@dataclass(frozen=True)
class PresharedKey:
    address: str = ""
    mask: str = ""
    key: str = ""


@dataclass(frozen=True)
class IKEKeychain:
    id: str = ""
    name: str = ""
    preshared_keys: tuple[PresharedKey, ...] = ()


@dataclass(frozen=True)
class IKEProfile:
    id: str = ""
    name: str = ""
    keychain_id: str = ""
    match_remote_address: str = ""
    local_identity: str = ""


@dataclass(frozen=True)
class ManualSA:
    inbound_spi: str = ""
    outbound_spi: str = ""
    inbound_key: str = ""
    outbound_key: str = ""


@dataclass(frozen=True)
class IPsecPolicy:
    id: str = ""
    name: str = ""
    seq_number: str = ""
    mode: str = "isakmp"  # isakmp, manual
    acl_id: str = ""
    transform_set_ids: tuple[str, ...] = ()
    remote_address: str = ""
    local_address: str = ""
    ike_profile_id: str = ""
    manual_sa: Optional[ManualSA] = None


@dataclass(frozen=True)
class IPsecConfig(FeatureBlock):
    enabled: bool = False
    transform_sets: tuple[IPsecTransformSet, ...] = ()
    ike_keychains: tuple[IKEKeychain, ...] = ()
    ike_profiles: tuple[IKEProfile, ...] = ()
    policies: tuple[IPsecPolicy, ...] = ()


@dataclass(frozen=True)
class GRETunnel:
    tunnel_number: str = ""
    description: str = ""
    ip_address: str = ""
    mask: str = ""
    source_type: str = "address"  # address, interface
    source_value: str = ""
    destination_address: str = ""
    mtu: str = ""
    keepalive_enabled: bool = False
    keepalive_period: str = ""
    keepalive_retry_times: str = ""
    security_zone: str = ""
    gre_key: str = ""
    gre_checksum: bool = False
    df_bit_enable: bool = False


@dataclass(frozen=True)
class GREConfig(FeatureBlock):
    enabled: bool = False
    tunnels: tuple[GRETunnel, ...] = ()


# --- Management and wireless ---

@dataclass(frozen=True)
class SSHUser:
    username: str = ""
    password: str = ""
    auth_type: str = "password"  # password, public-key


@dataclass(frozen=True)
class SSHConfig(FeatureBlock):
    enabled: bool = False
    users: tuple[SSHUser, ...] = ()
    vty_lines: str = "0 4"
    authentication_mode: str = "scheme"  # scheme, password
    protocol_inbound: str = "ssh"  # ssh, telnet, all
    domain_name: str = ""
    source_interface: str = ""


@dataclass(frozen=True)
class ServiceTemplate:
    """H3C wireless service template."""
    template_name: str = ""
    ssid: str = ""
    description: str = ""
    default_vlan: str = ""
    ssid_hide: bool = False
    max_clients: str = ""
    auth_mode: str = "static-psk"  # static-psk, open
    security_mode: str = "wpa2"  # wpa, wpa2, wpa-wpa2
    psk_password: str = ""
    psk_type: str = "passphrase"  # passphrase, rawkey
    enabled: bool = True


@dataclass(frozen=True)
class SecurityProfile:
    profile_name: str = ""
    psk: str = ""


@dataclass(frozen=True)
class SSIDProfile:
    profile_name: str = ""
    ssid: str = ""


@dataclass(frozen=True)
class VAPProfile:
    profile_name: str = ""
    security_profile: str = ""
    ssid_profile: str = ""
    vlan_id: str = ""
    forward_mode: str = "direct-forward"  # direct-forward, tunnel


@dataclass(frozen=True)
class VAPBinding:
    vap_profile_name: str = ""
    radio: str = "all"  # 0, 1, all


@dataclass(frozen=True)
class APGroup:
    group_name: str = ""
    description: str = ""
    service_templates: tuple[str, ...] = ()  # H3C
    vap_bindings: tuple[VAPBinding, ...] = ()  # Huawei
    vlan_id: str = ""


@dataclass(frozen=True)
class APDevice:
    ap_name: str = ""
    model: str = ""
    serial_number: str = ""
    mac_address: str = ""
    group_name: str = ""


@dataclass(frozen=True)
class WirelessConfig(FeatureBlock):
    enabled: bool = False
    ac_source_interface: str = ""
    country_code: str = "CN"
    ap_auth_mode: str = "mac"  # mac, sn
    security_profiles: tuple[SecurityProfile, ...] = ()
    ssid_profiles: tuple[SSIDProfile, ...] = ()
    vap_profiles: tuple[VAPProfile, ...] = ()
    ap_groups: tuple[APGroup, ...] = ()
    ap_devices: tuple[APDevice, ...] = ()
    service_templates: tuple[ServiceTemplate, ...] = ()


# --- Device and topology ---

@dataclass(frozen=True)
class Configuration:
    """Fixed set of feature blocks for one device; all disabled when new."""
    dhcp: DHCPConfig = field(default_factory=DHCPConfig)
    dhcp_relay: DHCPRelayConfig = field(default_factory=DHCPRelayConfig)
    dhcp_snooping: DHCPSnoopingConfig = field(default_factory=DHCPSnoopingConfig)
    vlan: VLANConfig = field(default_factory=VLANConfig)
    interface_ip: InterfaceIPConfig = field(default_factory=InterfaceIPConfig)
    link_aggregation: LinkAggregationConfig = field(default_factory=LinkAggregationConfig)
    port_isolation: PortIsolationConfig = field(default_factory=PortIsolationConfig)
    stacking: StackingConfig = field(default_factory=StackingConfig)
    mlag: MLAGConfig = field(default_factory=MLAGConfig)
    stp: STPConfig = field(default_factory=STPConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    vrrp: VRRPConfig = field(default_factory=VRRPConfig)
    wireless: WirelessConfig = field(default_factory=WirelessConfig)
    acl: ACLsConfig = field(default_factory=ACLsConfig)
    nat: NATConfig = field(default_factory=NATConfig)
    ssh: SSHConfig = field(default_factory=SSHConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    object_groups: ObjectGroupConfig = field(default_factory=ObjectGroupConfig)
    ipsec: IPsecConfig = field(default_factory=IPsecConfig)
    ha: HAConfig = field(default_factory=HAConfig)
    gre: GREConfig = field(default_factory=GREConfig)
    time_ranges: tuple[TimeRange, ...] = ()

    def block(self, feature: Feature) -> FeatureBlock:
        """Get the block for a feature."""
        return getattr(self, feature.key)


@dataclass(frozen=True)
class Port:
    id: str = ""
    name: str = ""
    status: str = "available"  # available, connected


@dataclass(frozen=True)
class Device:
    """A configurable network device."""
    id: str
    name: str = ""
    vendor: Vendor = Vendor.GENERIC
    device_type: DeviceType = DeviceType.ROUTER
    ports: tuple[Port, ...] = ()
    config: Configuration = field(default_factory=Configuration)

    def port_name(self, port_id: str) -> str:
        """Resolve a port id to its name, empty if unknown."""
        for port in self.ports:
            if port.id == port_id:
                return port.name
        return ""


@dataclass(frozen=True)
class LinkConfig:
    """Switchport settings carried on a topology edge."""
    mode: LinkMode = LinkMode.UNCONFIGURED
    access_vlan: str = ""
    trunk_native_vlan: str = ""
    trunk_allowed_vlans: str = ""
    apply_to_port_range: str = ""


@dataclass(frozen=True)
class Endpoint:
    node_id: str = ""
    port_id: str = ""


@dataclass(frozen=True)
class Connection:
    """Topology edge between two device ports."""
    id: str = ""
    source: Endpoint = field(default_factory=Endpoint)
    target: Endpoint = field(default_factory=Endpoint)
    config: LinkConfig = field(default_factory=LinkConfig)

    def local_port(self, device_id: str) -> Optional[str]:
        """Port id on ``device_id``'s side, None if the edge does not touch it."""
        if self.source.node_id == device_id:
            return self.source.port_id
        if self.target.node_id == device_id:
            return self.target.port_id
        return None
