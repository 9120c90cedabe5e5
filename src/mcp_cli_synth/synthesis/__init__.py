"""Configuration synthesis - vendor CLI from a vendor-neutral model.

- Per-feature compilers for Cisco IOS, Huawei VRP and H3C Comware
- Cross-reference resolution that omits dangling clauses with a note
- A full-device aggregate script wrapped once in global mode
- A debounced, staleness-guarded incremental build scheduler

Usage:
    from mcp_cli_synth.synthesis import ConfigParser, SynthesisEngine

    device = ConfigParser().parse_device({
        "id": "core-sw1",
        "name": "CORE-SW1",
        "vendor": "Huawei",
        "type": "L3 Switch",
        "config": {"vlan": {"enabled": True, "vlanInterfaces": [
            {"vlanId": "10", "ipAddress": "10.0.10.1", "subnetMask": "255.255.255.0"},
        ]}},
    })
    print(SynthesisEngine().compile_all(device))
"""

from .aggregator import compile_all
from .applicability import FEATURE_APPLICABILITY, applicable_features, is_applicable
from .compilers import COMPILERS, FeatureCompiler, get_compiler, parse_feature
from .dialect import DIALECTS, Dialect, get_dialect
from .edits import changed_features, replace_feature, set_feature_output, update_feature
from .engine import SynthesisEngine
from .errors import SynthesisError, UnknownFeatureError, UnsupportedVendorError
from .parser import ConfigParser, ParseError
from .scheduler import BuildScheduler
from .schema import (
    EMPTY_OUTPUT,
    FAILED_CLI,
    Configuration,
    Connection,
    Device,
    DeviceType,
    Endpoint,
    Feature,
    FeatureOutput,
    LinkConfig,
    LinkMode,
    Port,
    Vendor,
    failure_output,
)

__all__ = [
    # Entry points
    "SynthesisEngine",
    "BuildScheduler",
    "compile_all",
    # Model
    "Configuration",
    "Connection",
    "Device",
    "DeviceType",
    "Endpoint",
    "Feature",
    "FeatureOutput",
    "LinkConfig",
    "LinkMode",
    "Port",
    "Vendor",
    "EMPTY_OUTPUT",
    "FAILED_CLI",
    "failure_output",
    # Edits
    "changed_features",
    "replace_feature",
    "set_feature_output",
    "update_feature",
    # Tables and compilers
    "DIALECTS",
    "Dialect",
    "get_dialect",
    "FEATURE_APPLICABILITY",
    "applicable_features",
    "is_applicable",
    "COMPILERS",
    "FeatureCompiler",
    "get_compiler",
    "parse_feature",
    # Parsing and errors
    "ConfigParser",
    "ParseError",
    "SynthesisError",
    "UnknownFeatureError",
    "UnsupportedVendorError",
]
