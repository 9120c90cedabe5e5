"""Topology inventory loaded from YAML.

A topology file lists devices (keyed by id), the connections between their
ports and optional defaults merged into every device:

```yaml
defaults:
  vendor: Huawei
devices:
  core-sw1:
    name: CORE-SW1
    type: L3 Switch
    ports:
      - {id: p1, name: GigabitEthernet0/0/1}
    deploy:
      host: 192.0.2.10
      username: admin
      password_env: CORE_SW1_PASSWORD
    config:
      vlan:
        enabled: true
        vlanInterfaces:
          - {vlanId: "10", ipAddress: 10.0.10.1, subnetMask: 255.255.255.0}
connections:
  - id: c1
    source: {nodeId: core-sw1, portId: p1}
    target: {nodeId: access-sw1, portId: p24}
    config: {mode: trunk, trunkAllowedVlans: "10,20"}
```
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..synthesis.parser import ConfigParser, ParseError
from ..synthesis.schema import Connection, Device

logger = logging.getLogger(__name__)


@dataclass
class DeployTarget:
    """Where and how to open a CLI session for a device."""
    host: str
    port: int = 22
    username: str = ""
    password: Optional[str] = None
    password_env: str = "CLISYNTH_PASSWORD"

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")


class TopologyInventory:
    """Devices and connections of one topology, plus per-device deploy targets.

    Device values are immutable; ``put_device`` swaps in a new version.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config()
        self._raw: dict = {}
        self._devices: dict[str, Device] = {}
        self._connections: tuple[Connection, ...] = ()
        self._load_config()

    def _find_config(self) -> str:
        """Find the topology.yaml file."""
        env_path = os.environ.get("CLISYNTH_TOPOLOGY")
        if env_path:
            return env_path

        search_paths = [
            Path.cwd() / "configs" / "topology.yaml",
            Path.cwd() / "topology.yaml",
            Path.home() / ".config" / "mcp-cli-synth" / "topology.yaml",
        ]
        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            "Could not find topology.yaml. Create one in ./configs/topology.yaml "
            "or set CLISYNTH_TOPOLOGY"
        )

    def _load_config(self) -> None:
        """Load and parse the YAML topology."""
        with open(self.config_path, encoding="utf-8") as f:
            self._raw = yaml.safe_load(f) or {}
        if not isinstance(self._raw, dict):
            raise ParseError(f"{self.config_path}: top level must be a mapping")

        # Apply defaults
        defaults = self._raw.get("defaults", {}) or {}
        devices = self._raw.get("devices", {}) or {}
        if not isinstance(devices, dict):
            raise ParseError(f"{self.config_path}: 'devices' must be a mapping keyed by device id")
        for device_id, device_config in devices.items():
            if device_config is None:
                device_config = devices[device_id] = {}
            elif not isinstance(device_config, dict):
                raise ParseError(f"{self.config_path}: device '{device_id}' must be a mapping")
            for key, value in defaults.items():
                device_config.setdefault(key, value)

        self._devices, self._connections = ConfigParser().parse_topology(self._raw)
        logger.info(
            f"Loaded topology {self.config_path}: "
            f"{len(self._devices)} devices, {len(self._connections)} connections"
        )

    def reload(self) -> None:
        """Re-read the topology file, discarding in-memory device versions."""
        self._load_config()

    def get_device_ids(self) -> list[str]:
        """Get all device IDs."""
        return list(self._devices)

    def get_device(self, device_id: str) -> Device:
        """Get the current version of a device."""
        if device_id not in self._devices:
            raise KeyError(f"Unknown device: {device_id}")
        return self._devices[device_id]

    def put_device(self, device: Device) -> None:
        """Store a new version of a known device."""
        if device.id not in self._devices:
            raise KeyError(f"Unknown device: {device.id}")
        self._devices[device.id] = device

    def get_connections(self, device_id: Optional[str] = None) -> tuple[Connection, ...]:
        """All connections, or only those touching ``device_id``."""
        if device_id is None:
            return self._connections
        return tuple(c for c in self._connections if c.local_port(device_id) is not None)

    def get_deploy_target(self, device_id: str) -> Optional[DeployTarget]:
        """Deploy settings from the device's ``deploy`` entry, None if absent."""
        self.get_device(device_id)
        raw: dict[str, Any] = (self._raw.get("devices", {}).get(device_id) or {}).get("deploy") or {}
        if not raw.get("host"):
            return None
        return DeployTarget(
            host=str(raw["host"]),
            port=int(raw.get("port", 22)),
            username=str(raw.get("username", "")),
            password=raw.get("password"),
            password_env=raw.get("password_env", "CLISYNTH_PASSWORD"),
        )
