"""Incremental build scheduler.

Recompiles a feature some time after its last edit and merges the result
into the newest device value. Each (device id, feature) pair owns one slot
holding the pending timer and a request version; a timer whose version was
superseded fires as a no-op.

Environment Variables:
    CLISYNTH_DEBOUNCE_MS: Quiet period before a compile fires (default: 500)

Usage:
    scheduler = BuildScheduler(engine.compile_feature, store.active, store.put)
    scheduler.notify_change(old_device, new_device)
    await scheduler.flush()
"""
import asyncio
import inspect
import logging
import os
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from .applicability import is_applicable
from .edits import changed_features, set_feature_output
from .schema import EMPTY_OUTPUT, Device, Feature, FeatureOutput, failure_output

logger = logging.getLogger(__name__)

CompileFn = Callable[[Device, Feature], Union[FeatureOutput, Awaitable[FeatureOutput]]]
SlotKey = tuple[str, Feature]


def default_quiet_period() -> float:
    """Quiet period in seconds from CLISYNTH_DEBOUNCE_MS."""
    return int(os.environ.get("CLISYNTH_DEBOUNCE_MS", "500")) / 1000


@dataclass
class _Slot:
    version: int = 0
    handle: Optional[asyncio.TimerHandle] = None


class BuildScheduler:
    """Debounced, staleness-guarded feature recompiles.

    Args:
        compile_fn: ``(device, feature) -> FeatureOutput``, sync or async
        get_active_device: Returns the device currently being edited, or None
        on_device_update: Receives each new device value produced by a merge
        quiet_period: Seconds of inactivity before a compile fires
        loop: Event loop for timers, the running loop when omitted
    """

    def __init__(
        self,
        compile_fn: CompileFn,
        get_active_device: Callable[[], Optional[Device]],
        on_device_update: Callable[[Device], None],
        quiet_period: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._compile_fn = compile_fn
        self._get_active_device = get_active_device
        self._on_device_update = on_device_update
        self.quiet_period = default_quiet_period() if quiet_period is None else quiet_period
        self._loop = loop
        self._slots: dict[SlotKey, _Slot] = {}
        self._tasks: set[asyncio.Task] = set()
        # Surfaced to the UI as a "generating" indicator; not a lock
        self.in_flight: set[SlotKey] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def notify_change(self, previous: Optional[Device], current: Device) -> list[Feature]:
        """Schedule recompiles for every feature block replaced between two versions.

        Compound blocks (Security, Object Groups) whose sub-toggles are all
        off are cleared right away instead of waiting for the quiet period.

        Returns:
            The features that were scheduled or cleared
        """
        if previous is None or previous.id != current.id:
            return []
        changed = changed_features(previous, current)
        for feature in changed:
            block = current.config.block(feature)
            if block.compound and not block.is_enabled:
                self.clear(current, feature)
            else:
                self.schedule(current.id, feature)
        return changed

    def schedule(self, device_id: str, feature: Feature) -> None:
        """(Re)start the quiet period for one feature of one device."""
        key = (device_id, feature)
        slot = self._slots.setdefault(key, _Slot())
        if slot.handle is not None:
            slot.handle.cancel()
        slot.version += 1
        slot.handle = self.loop.call_later(self.quiet_period, self._fire, key, slot.version)
        logger.debug(f"Scheduled {feature.value} for {device_id} (v{slot.version})")

    def clear(self, device: Device, feature: Feature) -> None:
        """Drop any pending compile and write empty output immediately."""
        self._cancel_slot((device.id, feature))
        latest = self._latest(device.id) or device
        updated = set_feature_output(latest, feature, EMPTY_OUTPUT)
        if updated is not latest:
            logger.debug(f"Cleared {feature.value} output for {device.id}")
            self._on_device_update(updated)

    def is_pending(self, device_id: str, feature: Feature) -> bool:
        slot = self._slots.get((device_id, feature))
        return slot is not None and slot.handle is not None

    def is_generating(self, device_id: str, feature: Feature) -> bool:
        return (device_id, feature) in self.in_flight

    async def flush(self) -> None:
        """Fire every pending timer now and wait for all compiles to finish."""
        for key, slot in self._slots.items():
            if slot.handle is not None:
                slot.handle.cancel()
                self._fire(key, slot.version)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no compile task is running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def cancel_all(self) -> None:
        """Cancel every pending timer. Running compiles finish normally."""
        for key in list(self._slots):
            self._cancel_slot(key)

    # --- Internals ---

    def _cancel_slot(self, key: SlotKey) -> None:
        slot = self._slots.get(key)
        if slot is None:
            return
        if slot.handle is not None:
            slot.handle.cancel()
            slot.handle = None
        slot.version += 1

    def _latest(self, device_id: str) -> Optional[Device]:
        device = self._get_active_device()
        if device is None or device.id != device_id:
            return None
        return device

    def _fire(self, key: SlotKey, version: int) -> None:
        self._slots[key].handle = None
        task = self.loop.create_task(self._run(key, version))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, key: SlotKey, version: int) -> None:
        device_id, feature = key
        slot = self._slots.get(key)
        if slot is None or slot.version != version:
            logger.debug(f"{feature.value} for {device_id}: superseded request v{version}, skipped")
            return

        device = self._latest(device_id)
        if device is None:
            logger.debug(f"{feature.value} for {device_id}: device no longer active, skipped")
            return
        if not device.config.block(feature).is_enabled:
            return
        if not is_applicable(feature, device.device_type):
            return

        self.in_flight.add(key)
        try:
            try:
                output = self._compile_fn(device, feature)
                if inspect.isawaitable(output):
                    output = await output
            except Exception as e:
                logger.warning(f"{feature.value} failed to generate for {device_id}: {e}", exc_info=True)
                output = failure_output(feature)

            # Merge into whatever the newest value is, never the compile input
            latest = self._latest(device_id)
            if latest is None:
                logger.debug(f"{feature.value} for {device_id}: active device changed, result discarded")
                return
            updated = set_feature_output(latest, feature, output)
            if updated is not latest:
                self._on_device_update(updated)
        finally:
            self.in_flight.discard(key)
