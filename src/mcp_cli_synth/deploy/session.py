"""Client for the remote CLI session bridge.

The bridge owns the SSH connections; this side only opens a session, reads
its output stream, pushes text into it and closes it again:

    POST /api/ssh/connect            {host, port, username, password} -> {sessionId}
    GET  /api/ssh/stream/{id}        chunked terminal output
    POST /api/ssh/input/{id}         {command}
    POST /api/ssh/disconnect         {sessionId}

Environment Variables:
    CLISYNTH_SESSION_URL: Bridge base URL (default: http://localhost:3001)
"""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from ..config.inventory import DeployTarget
from ..utils.logging_config import timed
from ..utils.retry import with_retry

logger = logging.getLogger(__name__)

DEFAULT_SESSION_URL = "http://localhost:3001"


class DeployError(Exception):
    """The session bridge rejected a request."""
    pass


@dataclass
class DeployResult:
    """Outcome of pushing one script to one device."""
    device_id: str
    success: bool
    session_id: str = ""
    output: str = ""
    error: str = ""

    def to_dict(self) -> dict:
        return {
            "device_id": self.device_id,
            "success": self.success,
            "session_id": self.session_id,
            "output": self.output,
            "error": self.error,
        }


def _raise_for_status(resp: httpx.Response, action: str) -> None:
    if resp.status_code < 400:
        return
    try:
        detail = resp.json().get("error", "")
    except ValueError:
        detail = resp.text.strip()
    raise DeployError(f"{action} failed ({resp.status_code}): {detail or resp.reason_phrase}")


class RemoteSessionClient:
    """Async client for the session bridge.

    Usage:
        async with RemoteSessionClient() as client:
            sid = await client.open_session("192.0.2.10", 22, "admin", "secret")
            await client.send_input(sid, "display version\\n")
            await client.close_session(sid)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or os.environ.get("CLISYNTH_SESSION_URL", DEFAULT_SESSION_URL)).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "RemoteSessionClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @timed("session_connect")
    @with_retry(max_attempts=3, min_wait=1, max_wait=10)
    async def open_session(self, host: str, port: int, username: str, password: str) -> str:
        """Open a CLI session and return its id."""
        resp = await self._client().post(
            "/api/ssh/connect",
            json={"host": host, "port": str(port), "username": username, "password": password},
        )
        _raise_for_status(resp, "connect")
        session_id = resp.json().get("sessionId")
        if not session_id:
            raise DeployError("connect failed: bridge returned no sessionId")
        logger.info(f"Opened session {session_id} to {host}:{port}")
        return session_id

    async def stream_output(self, session_id: str) -> AsyncIterator[str]:
        """Yield terminal output chunks until the bridge closes the stream."""
        async with self._client().stream("GET", f"/api/ssh/stream/{session_id}") as resp:
            _raise_for_status(resp, "stream")
            async for chunk in resp.aiter_text():
                yield chunk

    @with_retry(max_attempts=3, min_wait=1, max_wait=10)
    async def send_input(self, session_id: str, command: str) -> None:
        """Push literal text into the session."""
        resp = await self._client().post(f"/api/ssh/input/{session_id}", json={"command": command})
        _raise_for_status(resp, "input")

    async def close_session(self, session_id: str) -> None:
        resp = await self._client().post("/api/ssh/disconnect", json={"sessionId": session_id})
        _raise_for_status(resp, "disconnect")
        logger.info(f"Closed session {session_id}")


async def deploy_script(
    client: RemoteSessionClient,
    target: DeployTarget,
    script: str,
    device_id: str = "",
    settle: float = 2.0,
) -> DeployResult:
    """Push a complete script into a new session and collect the echoed output.

    Args:
        client: Session bridge client
        target: Host and credentials of the device
        script: Full script, already wrapped in the vendor's global mode
        device_id: Label for logs and the result
        settle: Seconds to keep reading output after the script is sent

    Returns:
        DeployResult; bridge and transport failures are reported in ``error``
    """
    if not script.strip():
        return DeployResult(device_id=device_id, success=False, error="Nothing to deploy")

    try:
        session_id = await client.open_session(
            target.host, target.port, target.username, target.get_password()
        )
    except (DeployError, httpx.HTTPError) as e:
        logger.error(f"Deploy to {device_id} failed: {e}")
        return DeployResult(device_id=device_id, success=False, error=str(e))

    chunks: list[str] = []

    async def collect() -> None:
        async for chunk in client.stream_output(session_id):
            chunks.append(chunk)

    reader = asyncio.create_task(collect())
    result = DeployResult(device_id=device_id, success=True, session_id=session_id)
    try:
        await client.send_input(session_id, script.rstrip("\n") + "\n")
        await asyncio.wait({reader}, timeout=settle)
    except (DeployError, httpx.HTTPError) as e:
        logger.error(f"Deploy to {device_id} failed: {e}")
        result.success = False
        result.error = str(e)
    finally:
        if not reader.done():
            reader.cancel()
        try:
            await reader
        except asyncio.CancelledError:
            pass
        except (DeployError, httpx.HTTPError) as e:
            logger.warning(f"Output stream for {device_id} ended with error: {e}")
        try:
            await client.close_session(session_id)
        except (DeployError, httpx.HTTPError) as e:
            logger.warning(f"Could not close session {session_id}: {e}")

    result.output = "".join(chunks)
    logger.info(f"Deployed {len(script.splitlines())} lines to {device_id} (success={result.success})")
    return result
