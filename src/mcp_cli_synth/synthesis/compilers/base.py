"""Base class for per-feature compilers.

A compiler is a strategy object: ``compile()`` performs the checks every
feature shares, then dispatches to ``emit_<dialect key>`` for the device's
vendor. Each vendor method returns the feature body as a list of lines and
orders its own sub-commands.
"""
from abc import ABC
from typing import Callable, Iterable, Optional

from ..applicability import is_applicable
from ..dialect import Dialect, get_dialect
from ..schema import (
    Configuration,
    Connection,
    Device,
    DeviceType,
    EMPTY_OUTPUT,
    Feature,
    FeatureBlock,
    FeatureOutput,
    Vendor,
)

ALL_VENDORS = frozenset({Vendor.CISCO, Vendor.HUAWEI, Vendor.H3C})

Emitter = Callable[["CompileContext", FeatureBlock], list[str]]


class CompileContext:
    """Inputs and scratch notes for a single compile call.

    A fresh context is built per call so concurrent compiles of different
    features never share mutable state.
    """

    def __init__(
        self,
        device: Device,
        dialect: Dialect,
        connections: Iterable[Connection] = (),
    ):
        self.device = device
        self.dialect = dialect
        self.connections: tuple[Connection, ...] = tuple(connections)
        self.notes: list[str] = []
        self.clauses: list[str] = []

    @property
    def config(self) -> Configuration:
        return self.device.config

    @property
    def vendor(self) -> Vendor:
        return self.device.vendor

    @property
    def is_firewall(self) -> bool:
        return self.device.device_type == DeviceType.FIREWALL

    def note(self, message: str) -> None:
        """Record why a clause was omitted or degraded."""
        self.notes.append(message)

    def explain(self, command: str, text: str) -> None:
        """Record what one emitted command does."""
        self.clauses.append(f"`{command.strip()}`: {text}")

    def add(self, lines: list[str], command: str, text: str) -> None:
        """Append a command and its explanation."""
        lines.append(command)
        self.explain(command, text)

    def interface(self, name: str, body: list[str], shutdown_toggle: bool = False) -> list[str]:
        """Render an interface block closed with the dialect's exit command."""
        lines = [f"interface {name}", *body]
        if shutdown_toggle and self.dialect.key == "cisco":
            lines.append(" no shutdown")
        lines.append(self.dialect.block_exit)
        return lines


class FeatureCompiler(ABC):
    """Compile one feature block into vendor CLI.

    Subclasses set ``feature`` and implement ``emit_cisco``, ``emit_huawei``
    and/or ``emit_h3c``. A vendor without a method, or outside ``vendors``,
    compiles to empty output.
    """

    feature: Feature
    vendors: frozenset[Vendor] = ALL_VENDORS
    summary = ""

    def compile(self, device: Device, connections: Iterable[Connection] = ()) -> FeatureOutput:
        """Compile this feature for a device.

        Args:
            device: Full device snapshot (cross-references are read from it)
            connections: Topology edges, used by features that infer wiring

        Returns:
            FeatureOutput, empty when the feature is disabled, not applicable
            to the device type, or not available for the vendor
        """
        block = device.config.block(self.feature)
        if not block.is_enabled:
            return EMPTY_OUTPUT
        if not is_applicable(self.feature, device.device_type):
            return EMPTY_OUTPUT
        if device.vendor not in self.vendors:
            return EMPTY_OUTPUT

        dialect = get_dialect(device.vendor)
        emit = self.strategy(dialect)
        if emit is None:
            return EMPTY_OUTPUT

        ctx = CompileContext(device, dialect, connections)
        lines = emit(ctx, block)
        cli = "\n".join(lines).strip()
        return FeatureOutput(cli=cli, explanation=self.explain(ctx, cli))

    def strategy(self, dialect: Dialect) -> Optional[Emitter]:
        """Vendor method selected through the dialect table."""
        return getattr(self, f"emit_{dialect.key}", None)

    def explain(self, ctx: CompileContext, cli: str) -> str:
        """Summary line, one line per explained command, then one line per note."""
        if cli:
            headline = self.summary or f"{self.feature.value} configuration"
            lines = [f"{headline} for {ctx.vendor.value} {ctx.device.device_type.value}."]
            lines.extend(ctx.clauses)
        else:
            lines = [f"{self.feature.value} is enabled but has nothing to configure yet."]
        lines.extend(f"NOTE: {note}" for note in ctx.notes)
        return "\n".join(lines)


def opt(value: str, template: str) -> list[str]:
    """One formatted line when ``value`` is set, nothing otherwise."""
    return [template.format(value)] if value else []
