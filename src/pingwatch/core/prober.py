from __future__ import annotations

import asyncio
import logging
import math
import os
import subprocess
import sys

from pingwatch.models import is_ipv4_address

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


def ping_command(address: str, count: int = 1, timeout: float = 1.5) -> list[str]:
    if IS_WINDOWS:
        return ["ping", "-n", str(count), "-w", str(int(timeout * 1000)), address]
    if sys.platform == "darwin":
        # macOS takes -W in milliseconds
        return ["ping", "-c", str(count), "-W", str(int(timeout * 1000)), address]
    return ["ping", "-c", str(count), "-W", str(max(1, math.ceil(timeout))), address]


class PingProber:
    """Reachability probe backed by the system ``ping`` command."""

    def __init__(self, timeout: float = 1.5, visible_count: int = 4) -> None:
        self.timeout = timeout
        self.visible_count = visible_count

    async def probe(self, address: str) -> bool:
        if not is_ipv4_address(address):
            logger.debug("Not pinging invalid address %r", address)
            return False
        command = ping_command(address, count=1, timeout=self.timeout)
        creationflags = (
            subprocess.CREATE_NO_WINDOW  # type: ignore[attr-defined]
            if IS_WINDOWS
            else 0
        )
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                creationflags=creationflags,
            )
            stdout, _ = await process.communicate()
        except OSError as exc:
            logger.debug("Ping of %s could not run: %s", address, exc)
            return False

        if IS_WINDOWS:
            # Windows ping exits 0 on "destination host unreachable" replies too
            return b"TTL=" in stdout
        return process.returncode == 0

    async def probe_visible(self, address: str) -> None:
        """Run a ping the user can watch. Does not report a result."""
        if not is_ipv4_address(address):
            logger.warning("Refusing to ping invalid address %r", address)
            return

        if IS_WINDOWS:
            subprocess.Popen(
                ["cmd.exe", "/c", "start", '"Ping"', "cmd", "/k", f"ping {address}"],
                creationflags=subprocess.DETACHED_PROCESS,  # type: ignore[attr-defined]
            )
            return

        command = ping_command(
            address, count=self.visible_count, timeout=self.timeout
        )
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            logger.warning("Ping of %s could not run: %s", address, exc)
            return

        if process.stdout is not None:
            async for line in process.stdout:
                text = line.decode("utf-8", errors="replace").rstrip()
                if text:
                    logger.info("[%s] %s", address, text)
        await process.wait()
