"""Immutable edit helpers for the configuration model.

Every function takes the old value and returns a new one. Untouched blocks
keep their identity, so callers detect changes with ``is`` rather than deep
comparison.
"""
from dataclasses import replace
from typing import Any

from .schema import Device, Feature, FeatureBlock, FeatureOutput


def replace_feature(device: Device, feature: Feature, block: FeatureBlock) -> Device:
    """Return a new device with one feature block swapped out."""
    config = replace(device.config, **{feature.key: block})
    return replace(device, config=config)


def update_feature(device: Device, feature: Feature, **changes: Any) -> Device:
    """Return a new device with fields of one feature block changed.

    Usage:
        device = update_feature(device, Feature.DHCP, enabled=True)
    """
    block = replace(device.config.block(feature), **changes)
    return replace_feature(device, feature, block)


def set_feature_output(device: Device, feature: Feature, output: FeatureOutput) -> Device:
    """Write compiled ``cli``/``explanation`` into a feature block.

    Only the two cache fields change; every other field of the block is taken
    from ``device`` as given, which is expected to be the latest snapshot.
    """
    block = device.config.block(feature)
    if block.cli == output.cli and block.explanation == output.explanation:
        return device
    return update_feature(device, feature, cli=output.cli, explanation=output.explanation)


def changed_features(previous: Device, current: Device) -> list[Feature]:
    """Features whose block was replaced between two versions of a device.

    A replaced block that differs from the old one only in ``cli`` and
    ``explanation`` is a compiler write-back and is not reported. A block
    rebuilt from scratch carries empty cache fields, so any change to its
    settings is still reported.
    Time ranges are shared by ACL and Security, so replacing them marks both.
    """
    changed = []
    for feature in Feature:
        old = previous.config.block(feature)
        new = current.config.block(feature)
        if old is new or _is_write_back(old, new):
            continue
        changed.append(feature)

    if previous.config.time_ranges is not current.config.time_ranges:
        for feature in (Feature.ACL, Feature.SECURITY):
            if feature not in changed:
                changed.append(feature)
    return changed


def _is_write_back(old: FeatureBlock, new: FeatureBlock) -> bool:
    return new == replace(old, cli=new.cli, explanation=new.explanation)
