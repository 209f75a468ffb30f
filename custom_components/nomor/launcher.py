# File: launcher.py
"""Process launcher for managed applications.

Starts an external executable on the Home Assistant host in its own process
group and terminates that group again when the session ends. At most one
launched application runs at a time; starting a new one stops the previous.
Blocking process calls run in the executor.
"""

from __future__ import annotations

import asyncio
import os
import signal
import subprocess
from typing import TYPE_CHECKING

from homeassistant.exceptions import HomeAssistantError

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class LaunchError(HomeAssistantError):
    """Raised when an application cannot be started or stopped."""


class ProcessLauncher:
    """Start and stop one external application process."""

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize the launcher."""
        self.hass = hass
        self._process: subprocess.Popen | None = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        """True if a launched process is still alive."""
        return self._process is not None and self._process.poll() is None

    async def async_start(self, path: str) -> None:
        """Launch path, replacing any application started earlier.

        Raises:
            LaunchError: The executable could not be started
        """
        async with self._lock:
            await self.hass.async_add_executor_job(self._start, path)

    async def async_stop(self) -> None:
        """Terminate the launched application, if any.

        The process is detached before the first await, so an application
        started after this call is never the one terminated.

        Raises:
            LaunchError: The process group could not be terminated
        """
        await self.async_terminate(self.detach())

    def detach(self) -> subprocess.Popen | None:
        """Forget the launched process without signalling it and return it."""
        proc, self._process = self._process, None
        return proc

    async def async_terminate(self, proc: subprocess.Popen | None) -> None:
        """Terminate a process previously returned by detach().

        Raises:
            LaunchError: The process group could not be terminated
        """
        if proc is None:
            return
        async with self._lock:
            await self.hass.async_add_executor_job(self._terminate, proc)

    def _start(self, path: str) -> None:
        previous = self.detach()
        if previous is not None:
            try:
                self._terminate(previous)
            except LaunchError as err:
                const.LOGGER.warning(
                    "ProcessLauncher: Could not stop previous app: %s", err
                )

        try:
            self._process = subprocess.Popen(
                [path],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, ValueError) as err:
            self._process = None
            raise LaunchError(f"Failed to start {path}: {err}") from err
        const.LOGGER.info(
            "ProcessLauncher: Started %s (pid %s)", path, self._process.pid
        )

    def _terminate(self, proc: subprocess.Popen) -> None:
        if proc.poll() is not None:
            return

        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except ProcessLookupError:
            return
        except OSError:
            proc.terminate()

        try:
            proc.wait(timeout=const.LAUNCHER_STOP_TIMEOUT)
        except subprocess.TimeoutExpired:
            const.LOGGER.warning(
                "ProcessLauncher: pid %s ignored SIGTERM, killing", proc.pid
            )
            try:
                os.killpg(proc.pid, signal.SIGKILL)
                proc.wait(timeout=const.LAUNCHER_STOP_TIMEOUT)
            except (OSError, subprocess.TimeoutExpired) as err:
                raise LaunchError(f"Failed to kill pid {proc.pid}: {err}") from err
        const.LOGGER.info("ProcessLauncher: Stopped pid %s", proc.pid)
