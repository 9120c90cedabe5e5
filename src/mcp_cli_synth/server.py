"""MCP Server for vendor CLI synthesis.

Compiles a vendor-neutral device model into Cisco IOS, Huawei VRP and H3C
Comware command scripts, and pushes finished scripts through the remote
session bridge.

Tools exposed:
- list_devices: List devices in the topology with vendor and type
- list_features: Feature status for one device (applicable, enabled, cached output)
- compile_feature: Compile one feature and store its output
- compile_all: Build the full deployable script for a device
- update_feature: Replace a feature block and schedule its recompile
- deploy_config: Push the full script to a device (or preview it)
"""
import asyncio
import json
import logging
from dataclasses import replace
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .config.inventory import TopologyInventory
from .deploy.session import RemoteSessionClient, deploy_script
from .synthesis import (
    BuildScheduler,
    ConfigParser,
    Device,
    Feature,
    SynthesisEngine,
    is_applicable,
    parse_feature,
    replace_feature,
    set_feature_output,
)
from .synthesis.compilers import get_compiler
from .utils.logging_config import setup_logging, timed_section, global_stats

# Configure logging - file output and performance tracking
setup_logging()
logger = logging.getLogger(__name__)

# Global state (initialized on first use)
inventory: Optional[TopologyInventory] = None
scheduler: Optional[BuildScheduler] = None
engine = SynthesisEngine()
active_device_id: Optional[str] = None


def get_inventory() -> TopologyInventory:
    """Get or create the topology inventory."""
    global inventory
    if inventory is None:
        inventory = TopologyInventory()
    return inventory


def get_active_device() -> Optional[Device]:
    """The device most recently edited through update_feature."""
    if active_device_id is None:
        return None
    return get_inventory().get_device(active_device_id)


def get_scheduler() -> BuildScheduler:
    """Get or create the build scheduler."""
    global scheduler
    if scheduler is None:
        inv = get_inventory()

        def compile_fn(device: Device, feature: Feature):
            return engine.compile_feature(device, feature, inv.get_connections(device.id))

        scheduler = BuildScheduler(compile_fn, get_active_device, inv.put_device)
    return scheduler


# Create MCP server
server = Server("mcp-cli-synth")

_DEVICE_ID = {
    "type": "string",
    "description": "Device ID from the topology file (e.g., 'core-sw1')"
}
_FEATURE = {
    "type": "string",
    "description": "Feature name or key (e.g., 'DHCP Relay', 'dhcp_relay', 'GRE VPN')"
}


# === TOOLS ===

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="list_devices",
            description="List all devices in the topology with vendor, type and port count",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="list_features",
            description=(
                "Show every feature for a device: whether it applies to the device type, "
                "whether it is enabled, and whether a recompile is pending or running"
            ),
            inputSchema={
                "type": "object",
                "properties": {"device_id": _DEVICE_ID},
                "required": ["device_id"]
            }
        ),
        Tool(
            name="compile_feature",
            description="Compile one feature of a device to vendor CLI with an explanation",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": _DEVICE_ID,
                    "feature": _FEATURE,
                },
                "required": ["device_id", "feature"]
            }
        ),
        Tool(
            name="compile_all",
            description=(
                "Build the full configuration script for a device, wrapped once in the "
                "vendor's global configuration mode"
            ),
            inputSchema={
                "type": "object",
                "properties": {"device_id": _DEVICE_ID},
                "required": ["device_id"]
            }
        ),
        Tool(
            name="update_feature",
            description=(
                "Replace a feature block with new settings (camelCase or snake_case keys). "
                "The feature is recompiled after a short quiet period."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": _DEVICE_ID,
                    "feature": _FEATURE,
                    "config": {
                        "type": "object",
                        "description": "Complete feature block, e.g. {\"enabled\": true, \"pools\": [...]}"
                    },
                    "wait": {
                        "type": "boolean",
                        "description": "Compile now and return the result instead of debouncing",
                        "default": False
                    }
                },
                "required": ["device_id", "feature", "config"]
            }
        ),
        Tool(
            name="deploy_config",
            description=(
                "Push the full configuration script to the device through the session bridge. "
                "ALWAYS use dry_run=true first to review the script."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": _DEVICE_ID,
                    "dry_run": {
                        "type": "boolean",
                        "description": "Return the script without deploying",
                        "default": True
                    }
                },
                "required": ["device_id"]
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    device_id = arguments.get("device_id", "N/A")

    async with timed_section(f"tool:{name}", device_id=device_id):
        try:
            inv = get_inventory()

            if name == "list_devices":
                return await handle_list_devices(inv)

            elif name == "list_features":
                return await handle_list_features(inv, arguments["device_id"])

            elif name == "compile_feature":
                return await handle_compile_feature(
                    inv,
                    arguments["device_id"],
                    arguments["feature"]
                )

            elif name == "compile_all":
                return await handle_compile_all(inv, arguments["device_id"])

            elif name == "update_feature":
                return await handle_update_feature(
                    inv,
                    arguments["device_id"],
                    arguments["feature"],
                    arguments["config"],
                    arguments.get("wait", False)
                )

            elif name == "deploy_config":
                return await handle_deploy_config(
                    inv,
                    arguments["device_id"],
                    arguments.get("dry_run", True)
                )

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


def _json(payload: dict) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


# === TOOL HANDLERS ===

async def handle_list_devices(inv: TopologyInventory) -> list[TextContent]:
    """List all devices."""
    devices = []
    for device_id in inv.get_device_ids():
        device = inv.get_device(device_id)
        devices.append({
            "id": device.id,
            "name": device.name,
            "vendor": device.vendor.value,
            "type": device.device_type.value,
            "ports": len(device.ports),
            "connections": len(inv.get_connections(device_id)),
            "deployable": inv.get_deploy_target(device_id) is not None,
        })
    return _json({"devices": devices})


async def handle_list_features(inv: TopologyInventory, device_id: str) -> list[TextContent]:
    """Feature status for one device."""
    device = inv.get_device(device_id)
    sched = get_scheduler()
    features = []
    for feature in Feature:
        block = device.config.block(feature)
        compiler = get_compiler(feature)
        features.append({
            "feature": feature.value,
            "key": feature.key,
            "applicable": is_applicable(feature, device.device_type),
            "vendor_supported": device.vendor in compiler.vendors,
            "enabled": block.is_enabled,
            "has_output": bool(block.cli),
            "pending": sched.is_pending(device_id, feature),
            "generating": sched.is_generating(device_id, feature),
        })
    return _json({"device_id": device_id, "features": features})


async def handle_compile_feature(
    inv: TopologyInventory,
    device_id: str,
    feature_name: str,
) -> list[TextContent]:
    """Compile one feature and store the output on the device."""
    feature = parse_feature(feature_name)
    device = inv.get_device(device_id)
    output = engine.compile_feature_safe(device, feature, inv.get_connections(device_id))
    inv.put_device(set_feature_output(device, feature, output))
    return _json({
        "device_id": device_id,
        "feature": feature.value,
        "cli": output.cli,
        "explanation": output.explanation,
    })


async def handle_compile_all(inv: TopologyInventory, device_id: str) -> list[TextContent]:
    """Full script for one device, as plain text."""
    device = inv.get_device(device_id)
    script = engine.compile_all(device, inv.get_connections(device_id))
    if not script:
        script = f"# Nothing to configure for {device_id} ({device.vendor.value})"
    return [TextContent(type="text", text=script)]


async def handle_update_feature(
    inv: TopologyInventory,
    device_id: str,
    feature_name: str,
    block_data: dict,
    wait: bool = False,
) -> list[TextContent]:
    """Replace a feature block and let the scheduler recompile it."""
    global active_device_id

    feature = parse_feature(feature_name)
    previous = inv.get_device(device_id)
    block = ConfigParser().parse_block(feature, block_data)
    # cached output stays until the recompile replaces it
    cached = previous.config.block(feature)
    block = replace(block, cli=cached.cli, explanation=cached.explanation)
    current = replace_feature(previous, feature, block)
    inv.put_device(current)

    active_device_id = device_id
    sched = get_scheduler()
    changed = sched.notify_change(previous, current)
    if wait:
        await sched.flush()

    latest = inv.get_device(device_id).config.block(feature)
    return _json({
        "device_id": device_id,
        "feature": feature.value,
        "changed": [f.value for f in changed],
        "pending": sched.is_pending(device_id, feature),
        "cli": latest.cli,
        "explanation": latest.explanation,
    })


async def handle_deploy_config(
    inv: TopologyInventory,
    device_id: str,
    dry_run: bool = True,
) -> list[TextContent]:
    """Compile and push the full script."""
    device = inv.get_device(device_id)
    script = engine.compile_all(device, inv.get_connections(device_id))

    if dry_run or not script:
        return _json({
            "device_id": device_id,
            "dry_run": True,
            "lines": len(script.splitlines()),
            "script": script,
        })

    target = inv.get_deploy_target(device_id)
    if target is None:
        return _json({
            "device_id": device_id,
            "success": False,
            "error": "No deploy target configured for this device (add a 'deploy' entry)",
        })

    async with RemoteSessionClient() as client:
        result = await deploy_script(client, target, script, device_id=device_id)
    return _json(result.to_dict())


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    inv = get_inventory()
    resources = []

    for device_id in inv.get_device_ids():
        device = inv.get_device(device_id)
        resources.append(Resource(
            uri=AnyUrl(f"topology://{device_id}/cli"),
            name=f"{device.name or device_id} CLI",
            description=f"Full {device.vendor.value} configuration script for {device_id}",
            mimeType="text/plain",
        ))

    return resources


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    # Parse URI: topology://device_id/cli
    uri_str = str(uri)
    if uri_str.startswith("topology://"):
        parts = uri_str[len("topology://"):].split("/")
        if len(parts) >= 2 and parts[1] == "cli":
            result = await handle_compile_all(get_inventory(), parts[0])
            return result[0].text

    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )
        if scheduler is not None:
            scheduler.cancel_all()
            await scheduler.wait_idle()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    finally:
        logger.info(global_stats.summary())


if __name__ == "__main__":
    main()
