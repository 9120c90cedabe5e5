"""Parser for configuration model input.

Converts dict/YAML/JSON input to the frozen schema objects. Keys may be
snake_case (``interface_ip``) or camelCase (``interfaceIP``); lists become
tuples; enums are matched by value.
"""
import dataclasses
import logging
import typing
from enum import Enum
from typing import Any, Iterable

from .errors import UnsupportedVendorError
from .schema import Configuration, Connection, Device, Feature, FeatureBlock, Vendor

logger = logging.getLogger(__name__)

# Field names the editor front end uses for a few attributes
ALIASES = {
    "from": "source",
    "to": "target",
    "type": "device_type",
}

_TRUE = {"true", "yes", "on", "1", "enabled"}
_FALSE = {"false", "no", "off", "0", "disabled", ""}


class ParseError(ValueError):
    """Error parsing configuration model input."""
    pass


def _normalize(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


class ConfigParser:
    """Parse devices and connections from dict format."""

    def parse_device(self, data: dict[str, Any]) -> Device:
        """
        Parse one device.

        Args:
            data: Dict with id, name, vendor, device_type (or type), ports, config

        Returns:
            Device object

        Raises:
            ParseError: If the data is malformed or the id is missing
            UnsupportedVendorError: If the vendor is not in the dialect table
        """
        if not isinstance(data, dict):
            raise ParseError(f"Device must be a mapping, got {type(data).__name__}")
        if not data.get("id"):
            raise ParseError("Missing required field: id")
        return self._build(Device, data, path=str(data["id"]))

    def parse_connection(self, data: dict[str, Any]) -> Connection:
        """Parse one topology edge (``source``/``target`` or ``from``/``to``)."""
        if not isinstance(data, dict):
            raise ParseError(f"Connection must be a mapping, got {type(data).__name__}")
        return self._build(Connection, data, path=f"connection {data.get('id', '?')}")

    def parse_block(self, feature: Feature, data: dict[str, Any]) -> FeatureBlock:
        """Parse a replacement block for one feature.

        The cached ``cli``/``explanation`` fields are not accepted from input.
        """
        if not isinstance(data, dict):
            raise ParseError(f"{feature.value} block must be a mapping, got {type(data).__name__}")
        cls = type(Configuration().block(feature))
        data = {k: v for k, v in data.items() if _normalize(str(k)) not in ("cli", "explanation")}
        return self._build(cls, data, path=feature.key)

    def parse_topology(self, data: dict[str, Any]) -> tuple[dict[str, Device], tuple[Connection, ...]]:
        """Parse a topology document.

        ``devices`` may be a list of device dicts or a mapping keyed by id; in
        the mapping form the key supplies the id when the entry has none.

        Returns:
            Tuple of (devices keyed by id, connections)
        """
        raw_devices = data.get("devices") or {}
        if isinstance(raw_devices, dict):
            entries: Iterable[dict] = (
                {"id": device_id, **(entry or {})} for device_id, entry in raw_devices.items()
            )
        elif isinstance(raw_devices, list):
            entries = raw_devices
        else:
            raise ParseError("'devices' must be a list or a mapping")

        devices: dict[str, Device] = {}
        for entry in entries:
            device = self.parse_device(entry)
            if device.id in devices:
                raise ParseError(f"Duplicate device id: {device.id}")
            devices[device.id] = device

        connections = tuple(self.parse_connection(c) for c in data.get("connections") or ())
        for conn in connections:
            for end in (conn.source, conn.target):
                if end.node_id not in devices:
                    logger.warning(f"Connection {conn.id} references unknown device: {end.node_id}")
        return devices, connections

    # --- Generic conversion ---

    def _build(self, cls: type, data: dict[str, Any], path: str) -> Any:
        hints = typing.get_type_hints(cls)
        fields = {_normalize(f.name): f for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            normalized = _normalize(str(key))
            field = fields.get(normalized)
            if field is None and normalized in ALIASES:
                field = fields.get(_normalize(ALIASES[normalized]))
            if field is None:
                logger.debug(f"{path}: ignoring unknown field '{key}'")
                continue
            if value is None:
                continue
            kwargs[field.name] = self._convert(hints[field.name], value, f"{path}.{field.name}")
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ParseError(f"{path}: {e}") from e

    def _convert(self, hint: Any, value: Any, path: str) -> Any:
        origin = typing.get_origin(hint)
        if origin is typing.Union:
            inner = [a for a in typing.get_args(hint) if a is not type(None)]
            return self._convert(inner[0], value, path)
        if origin is tuple:
            if not isinstance(value, (list, tuple)):
                raise ParseError(f"{path}: expected a list, got {type(value).__name__}")
            item_hint = typing.get_args(hint)[0]
            return tuple(self._convert(item_hint, v, f"{path}[{i}]") for i, v in enumerate(value))
        if dataclasses.is_dataclass(hint):
            if not isinstance(value, dict):
                raise ParseError(f"{path}: expected a mapping, got {type(value).__name__}")
            return self._build(hint, value, path)
        if isinstance(hint, type) and issubclass(hint, Enum):
            return self._enum(hint, value, path)
        if hint is bool:
            return self._bool(value, path)
        if hint is str:
            if isinstance(value, (dict, list)):
                raise ParseError(f"{path}: expected text, got {type(value).__name__}")
            return str(value)
        return value

    def _enum(self, enum_cls: type, value: Any, path: str) -> Enum:
        if isinstance(value, enum_cls):
            return value
        wanted = _normalize(str(value)).replace(" ", "")
        for member in enum_cls:
            if wanted in (_normalize(member.value).replace(" ", ""), _normalize(member.name)):
                return member
        if enum_cls is Vendor:
            raise UnsupportedVendorError(f"{path}: unsupported vendor '{value}'")
        choices = ", ".join(m.value for m in enum_cls)
        raise ParseError(f"{path}: invalid value '{value}', expected one of: {choices}")

    def _bool(self, value: Any, path: str) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return bool(value)
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ParseError(f"{path}: expected a boolean, got '{value}'")

