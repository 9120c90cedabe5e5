"""Synthesis engine - the entry points used by the scheduler and the server.

Provides:
1. Single-feature compiles, raw or with faults contained
2. Full-device script assembly
3. Compile-and-store helpers that return a new device value
"""
import logging
from typing import Iterable, Union

from .aggregator import compile_all
from .compilers import get_compiler, parse_feature
from .edits import set_feature_output
from .schema import Connection, Device, Feature, FeatureOutput, failure_output

logger = logging.getLogger(__name__)


class SynthesisEngine:
    """
    Compile configuration model values into vendor CLI.

    Usage:
        engine = SynthesisEngine()
        output = engine.compile_feature(device, "DHCP")
        script = engine.compile_all(device, connections)
    """

    def compile_feature(
        self,
        device: Device,
        feature: Union[Feature, str],
        connections: Iterable[Connection] = (),
    ) -> FeatureOutput:
        """
        Compile one feature of a device.

        Args:
            device: Device snapshot
            feature: Feature enum, display name or key
            connections: Topology edges

        Returns:
            FeatureOutput; empty when disabled, inapplicable or unsupported

        Raises:
            UnknownFeatureError: If the feature name is unknown
        """
        return get_compiler(feature).compile(device, connections)

    def compile_feature_safe(
        self,
        device: Device,
        feature: Union[Feature, str],
        connections: Iterable[Connection] = (),
    ) -> FeatureOutput:
        """Like compile_feature, but a compiler fault yields the failure placeholder."""
        feature = parse_feature(feature)
        try:
            return self.compile_feature(device, feature, connections)
        except Exception as e:
            logger.error(f"{feature.value} failed to generate for {device.id}: {e}", exc_info=True)
            return failure_output(feature)

    def compile_all(self, device: Device, connections: Iterable[Connection] = ()) -> str:
        """Full deployable script for a device."""
        return compile_all(device, connections)

    def refresh_feature(
        self,
        device: Device,
        feature: Union[Feature, str],
        connections: Iterable[Connection] = (),
    ) -> Device:
        """Compile one feature and store the output in its block."""
        feature = parse_feature(feature)
        output = self.compile_feature_safe(device, feature, connections)
        return set_feature_output(device, feature, output)

    def refresh_all(self, device: Device, connections: Iterable[Connection] = ()) -> Device:
        """Recompile every feature and store each output, returning the new device."""
        connections = tuple(connections)
        for feature in Feature:
            device = self.refresh_feature(device, feature, connections)
        return device
