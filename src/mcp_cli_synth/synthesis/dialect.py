"""Vendor dialect tables.

Lexical and syntax primitives for each vendor. Pure data, no side effects.
"""
from dataclasses import dataclass
from typing import Union

from .errors import UnsupportedVendorError
from .schema import Vendor


@dataclass(frozen=True)
class Dialect:
    """Command grammar primitives for one vendor."""
    vendor: Vendor
    # Name of the strategy methods on feature compilers (emit_<key>)
    key: str
    global_enter: str
    global_exit: str
    hostname_command: str
    vlan_interface_prefix: str
    aggregate_prefix: str
    negation: str
    comment: str
    block_exit: str
    needs_global_wrap: bool = True

    def vlan_interface(self, vlan_id: Union[str, int]) -> str:
        """Interface name for a VLAN id, e.g. Vlan10 / Vlanif10 / Vlan-interface10."""
        return f"{self.vlan_interface_prefix}{vlan_id}"

    def aggregate_interface(self, group_id: Union[str, int]) -> str:
        """Interface name of a link aggregation group."""
        return f"{self.aggregate_prefix}{group_id}"

    def negate(self, command: str) -> str:
        """Prefix a command with the vendor's negation keyword."""
        if not self.negation:
            return command
        return f"{self.negation} {command}"

    def comment_line(self, text: str = "") -> str:
        return f"{self.comment} {text}".rstrip()

    def wrap(self, body: list[str]) -> list[str]:
        """Wrap a body with global mode entry and exit."""
        if not self.needs_global_wrap:
            return list(body)
        return [self.global_enter, *body, self.global_exit]


CISCO = Dialect(
    vendor=Vendor.CISCO,
    key="cisco",
    global_enter="configure terminal",
    global_exit="end",
    hostname_command="hostname",
    vlan_interface_prefix="Vlan",
    aggregate_prefix="Port-channel",
    negation="no",
    comment="!",
    block_exit="exit",
)

HUAWEI = Dialect(
    vendor=Vendor.HUAWEI,
    key="huawei",
    global_enter="system-view",
    global_exit="return",
    hostname_command="sysname",
    vlan_interface_prefix="Vlanif",
    aggregate_prefix="Eth-Trunk",
    negation="undo",
    comment="#",
    block_exit="quit",
)

H3C = Dialect(
    vendor=Vendor.H3C,
    key="h3c",
    global_enter="system-view",
    global_exit="return",
    hostname_command="sysname",
    vlan_interface_prefix="Vlan-interface",
    aggregate_prefix="Bridge-Aggregation",
    negation="undo",
    comment="#",
    block_exit="quit",
)

# Placeholder for devices without a chosen vendor; never yields deployable CLI
GENERIC = Dialect(
    vendor=Vendor.GENERIC,
    key="generic",
    global_enter="",
    global_exit="",
    hostname_command="hostname",
    vlan_interface_prefix="Vlan",
    aggregate_prefix="Port-channel",
    negation="",
    comment="#",
    block_exit="",
    needs_global_wrap=False,
)

DIALECTS: dict[Vendor, Dialect] = {
    Vendor.CISCO: CISCO,
    Vendor.HUAWEI: HUAWEI,
    Vendor.H3C: H3C,
    Vendor.GENERIC: GENERIC,
}


def get_dialect(vendor: Union[Vendor, str]) -> Dialect:
    """Look up the dialect for a vendor.

    Args:
        vendor: Vendor enum or its string value ("Cisco", "Huawei", ...)

    Raises:
        UnsupportedVendorError: If the vendor is unknown
    """
    try:
        return DIALECTS[Vendor(vendor)]
    except ValueError:
        raise UnsupportedVendorError(f"Unsupported vendor: {vendor}") from None
