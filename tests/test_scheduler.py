"""Tests for the incremental build scheduler."""
import asyncio

import pytest

from mcp_cli_synth.synthesis.edits import replace_feature, update_feature
from mcp_cli_synth.synthesis.engine import SynthesisEngine
from mcp_cli_synth.synthesis.scheduler import BuildScheduler
from mcp_cli_synth.synthesis.schema import (
    DHCPConfig,
    DHCPPool,
    Device,
    DeviceType,
    FAILED_CLI,
    Feature,
    FeatureOutput,
    SecurityZone,
    Vendor,
)

QUIET = 0.05


class Store:
    """Holds the active device the way an editor would."""

    def __init__(self, device: Device):
        self.device = device
        self.updates: list[Device] = []

    def active(self) -> Device:
        return self.device

    def put(self, device: Device) -> None:
        self.device = device
        self.updates.append(device)

    def edit(self, scheduler: BuildScheduler, feature: Feature, **changes) -> Device:
        previous = self.device
        self.device = update_feature(previous, feature, **changes)
        scheduler.notify_change(previous, self.device)
        return self.device


def make_device(device_type: DeviceType = DeviceType.ROUTER) -> Device:
    return Device(id="r1", name="R1", vendor=Vendor.HUAWEI, device_type=device_type)


class RecordingCompiler:
    """Compile function that records every device it is given."""

    def __init__(self):
        self.engine = SynthesisEngine()
        self.calls: list[tuple[Device, Feature]] = []

    def __call__(self, device: Device, feature: Feature) -> FeatureOutput:
        self.calls.append((device, feature))
        return self.engine.compile_feature(device, feature)


class TestDebounce:
    """Tests for quiet-period coalescing."""

    @pytest.mark.asyncio
    async def test_rapid_edits_compile_once(self):
        """Three quick edits produce one compile of the last value."""
        store = Store(make_device())
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=QUIET)

        store.edit(scheduler, Feature.DHCP, enabled=True)
        for name in ("P0", "P1", "P2"):
            store.edit(scheduler, Feature.DHCP, pools=(DHCPPool(pool_name=name),))
        assert scheduler.is_pending("r1", Feature.DHCP)

        await asyncio.sleep(QUIET * 4)
        await scheduler.wait_idle()

        assert len(compiler.calls) == 1
        device, feature = compiler.calls[0]
        assert feature == Feature.DHCP
        assert device.config.dhcp.pools[0].pool_name == "P2"
        assert store.device.config.dhcp.cli == "dhcp enable\nip pool P2\nquit"
        assert not scheduler.is_pending("r1", Feature.DHCP)

    @pytest.mark.asyncio
    async def test_features_debounce_independently(self):
        """Edits to different features each get their own compile."""
        store = Store(make_device())
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=10)

        store.edit(scheduler, Feature.DHCP, enabled=True)
        store.edit(scheduler, Feature.SSH, enabled=True)
        await scheduler.flush()

        assert sorted(f.value for _, f in compiler.calls) == ["DHCP", "SSH"]
        assert store.device.config.dhcp.cli.startswith("dhcp enable")
        assert store.device.config.ssh.cli.startswith("stelnet server enable")

    @pytest.mark.asyncio
    async def test_write_back_does_not_reschedule(self):
        """Storing compiled output is not an edit."""
        store = Store(make_device())
        scheduler = BuildScheduler(RecordingCompiler(), store.active, store.put, quiet_period=10)
        before = store.edit(scheduler, Feature.DHCP, enabled=True)
        await scheduler.flush()

        assert scheduler.notify_change(before, store.device) == []
        assert not scheduler.is_pending("r1", Feature.DHCP)

    @pytest.mark.asyncio
    async def test_rebuilt_block_is_rescheduled(self):
        """A block rebuilt from scratch after a compile is compiled again."""
        store = Store(make_device())
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=10)
        store.edit(scheduler, Feature.DHCP, enabled=True, pools=(DHCPPool(pool_name="P1"),))
        await scheduler.flush()
        assert store.device.config.dhcp.cli == "dhcp enable\nip pool P1\nquit"

        previous = store.device
        store.device = replace_feature(
            previous, Feature.DHCP, DHCPConfig(enabled=True, pools=(DHCPPool(pool_name="P2"),))
        )
        assert scheduler.notify_change(previous, store.device) == [Feature.DHCP]
        assert scheduler.is_pending("r1", Feature.DHCP)

        await scheduler.flush()
        assert len(compiler.calls) == 2
        assert store.device.config.dhcp.cli == "dhcp enable\nip pool P2\nquit"

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        """Cancelled timers never fire."""
        store = Store(make_device())
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=QUIET)
        store.edit(scheduler, Feature.DHCP, enabled=True)

        scheduler.cancel_all()
        await asyncio.sleep(QUIET * 3)

        assert compiler.calls == []
        assert not scheduler.is_pending("r1", Feature.DHCP)

    def test_quiet_period_from_environment(self, monkeypatch):
        """CLISYNTH_DEBOUNCE_MS sets the default quiet period."""
        store = Store(make_device())
        monkeypatch.setenv("CLISYNTH_DEBOUNCE_MS", "250")
        assert BuildScheduler(RecordingCompiler(), store.active, store.put).quiet_period == 0.25
        monkeypatch.delenv("CLISYNTH_DEBOUNCE_MS")
        assert BuildScheduler(RecordingCompiler(), store.active, store.put).quiet_period == 0.5

    def test_other_device_ignored(self):
        """Versions of different devices are not compared."""
        store = Store(make_device())
        scheduler = BuildScheduler(RecordingCompiler(), store.active, store.put)
        other = Device(id="r2", vendor=Vendor.HUAWEI)
        assert scheduler.notify_change(store.device, other) == []
        assert scheduler.notify_change(None, other) == []


class TestStaleness:
    """Tests for merging results into the newest device value."""

    @pytest.mark.asyncio
    async def test_result_merged_into_latest(self):
        """Edits made during a compile survive the write-back."""
        store = Store(make_device())
        release = asyncio.Event()
        engine = SynthesisEngine()

        async def slow_compile(device, feature):
            await release.wait()
            return engine.compile_feature(device, feature)

        scheduler = BuildScheduler(slow_compile, store.active, store.put, quiet_period=0.01)
        store.edit(scheduler, Feature.DHCP, enabled=True)
        await asyncio.sleep(0.05)
        assert scheduler.is_generating("r1", Feature.DHCP)
        assert ("r1", Feature.DHCP) in scheduler.in_flight

        # Not reported to the scheduler, so nothing else gets compiled
        store.device = update_feature(store.device, Feature.SSH, domain_name="lab")
        release.set()
        await scheduler.wait_idle()

        assert store.device.config.ssh.domain_name == "lab"
        assert store.device.config.dhcp.cli == "dhcp enable"
        assert not scheduler.is_generating("r1", Feature.DHCP)

    @pytest.mark.asyncio
    async def test_switching_device_discards_result(self):
        """A result for a device that is no longer active is dropped."""
        store = Store(make_device())
        release = asyncio.Event()

        async def slow_compile(device, feature):
            await release.wait()
            return FeatureOutput("dhcp enable", "DHCP")

        scheduler = BuildScheduler(slow_compile, store.active, store.put, quiet_period=0.01)
        store.edit(scheduler, Feature.DHCP, enabled=True)
        await asyncio.sleep(0.05)

        store.device = Device(id="r2", vendor=Vendor.H3C)
        release.set()
        await scheduler.wait_idle()

        assert store.updates == []
        assert store.device.id == "r2"

    @pytest.mark.asyncio
    async def test_inactive_device_not_compiled(self):
        """A timer for a device that is no longer active does nothing."""
        store = Store(make_device())
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=10)
        store.edit(scheduler, Feature.DHCP, enabled=True)

        store.device = Device(id="r2", vendor=Vendor.H3C)
        await scheduler.flush()

        assert compiler.calls == []


class TestOutcomes:
    """Tests for failures, disabled blocks and compound clears."""

    @pytest.mark.asyncio
    async def test_failure_placeholder(self):
        """A raising compile stores the failure placeholder."""
        store = Store(make_device())

        def broken(device, feature):
            raise RuntimeError("boom")

        scheduler = BuildScheduler(broken, store.active, store.put, quiet_period=10)
        store.edit(scheduler, Feature.DHCP, enabled=True)
        await scheduler.flush()

        assert store.device.config.dhcp.cli == FAILED_CLI
        assert store.device.config.dhcp.explanation == "DHCP failed to generate"
        assert not scheduler.is_generating("r1", Feature.DHCP)

    @pytest.mark.asyncio
    async def test_disabled_feature_keeps_output(self):
        """Disabling a plain feature skips the compile and leaves its output."""
        store = Store(make_device())
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=10)
        store.edit(scheduler, Feature.DHCP, enabled=True)
        await scheduler.flush()
        compiled = store.device.config.dhcp.cli

        store.edit(scheduler, Feature.DHCP, enabled=False)
        await scheduler.flush()

        assert len(compiler.calls) == 1
        assert store.device.config.dhcp.cli == compiled

    @pytest.mark.asyncio
    async def test_inapplicable_feature_skipped(self):
        """Features illegal on the device type are never compiled."""
        store = Store(make_device(DeviceType.L2_SWITCH))
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=10)
        store.edit(scheduler, Feature.DHCP, enabled=True)
        await scheduler.flush()

        assert compiler.calls == []

    @pytest.mark.asyncio
    async def test_compound_cleared_immediately(self):
        """Turning off every security toggle clears its output at once."""
        store = Store(make_device(DeviceType.FIREWALL))
        compiler = RecordingCompiler()
        scheduler = BuildScheduler(compiler, store.active, store.put, quiet_period=10)
        store.edit(scheduler, Feature.SECURITY, zones_enabled=True, zones=(SecurityZone(name="trust"),))
        await scheduler.flush()
        assert store.device.config.security.cli == "firewall zone name trust\nquit"

        store.edit(scheduler, Feature.SECURITY, zones_enabled=False)

        assert store.device.config.security.cli == ""
        assert store.device.config.security.explanation == ""
        assert not scheduler.is_pending("r1", Feature.SECURITY)
        assert len(compiler.calls) == 1
