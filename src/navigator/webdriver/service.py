"""Supervisor for the external WebDriver process."""

from __future__ import annotations

import asyncio
import logging
import socket
import sys
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

import httpx

from ..config import settings
from ..core.exceptions import (
    AlreadyRunningError,
    AlreadyStoppedError,
    BootTimeoutError,
    ConfigurationError,
    ServiceError,
    TemplateError,
)

logger = logging.getLogger(__name__)

STDOUT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class AddressInfo:
    """Template parameters: {Address} is "{Host}:{Port}"."""

    Address: str
    Host: str
    Port: str


def get_free_address(host: str = "localhost") -> AddressInfo:
    """
    Reserve an ephemeral TCP port and release it immediately.

    The port may in principle be claimed by another process before the
    driver binds it; callers accept that race.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        bound_host, port = sock.getsockname()[:2]
    return AddressInfo(Address=f"{bound_host}:{port}", Host=bound_host, Port=str(port))


def build_url(url_template: str, address: AddressInfo) -> str:
    """Substitute {Address}, {Host} and {Port} into the URL template."""
    return url_template.format(**asdict(address))


def build_command(command_template: Sequence[str], address: AddressInfo) -> List[str]:
    """
    Substitute the address placeholders into every argument of the command.

    Raises:
        ConfigurationError: If the command template is empty
    """
    if not command_template:
        raise ConfigurationError("empty command")
    return [argument.format(**asdict(address)) for argument in command_template]


class Service:
    """
    Owns one WebDriver process: Stopped -> Running -> Stopped.

    start() and stop() run under a single asyncio.Lock, so only one
    transition is ever in flight; the process handle and base URL are only
    read or written while holding it.
    """

    def __init__(
        self,
        url_template: str,
        command_template: Sequence[str],
        poll_interval: Optional[float] = None,
        status_timeout: Optional[float] = None,
    ):
        self.url_template = url_template  # eg. "http://{Address}"
        self.command_template = list(command_template)  # eg. ["chromedriver", "--port={Port}"]
        self._poll_interval = (
            poll_interval if poll_interval is not None else settings.boot_poll_interval_seconds
        )
        self._status_timeout = (
            status_timeout if status_timeout is not None else settings.status_timeout_seconds
        )
        self._base_url = ""
        self._process: Optional[asyncio.subprocess.Process] = None
        self._stdout_task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        """Base URL of the running service, or "" when stopped."""
        return self._base_url

    @property
    def running(self) -> bool:
        return self._process is not None

    async def start(self, debug: bool = False) -> None:
        """
        Start the driver process on a free local port.

        Args:
            debug: Stream the driver's stdout to the logger

        Raises:
            AlreadyRunningError: If the process is already running
            TemplateError: If the URL or command template is invalid
            ServiceError: If the process cannot start
        """
        async with self._lock:
            if self._process is not None:
                raise AlreadyRunningError()

            try:
                address = get_free_address()
            except OSError as e:
                raise ServiceError(f"failed to locate a free port: {e}") from e

            try:
                url = build_url(self.url_template, address)
            except (KeyError, IndexError, ValueError) as e:
                raise TemplateError(f"failed to parse URL: {e!r}") from e

            try:
                command = build_command(self.command_template, address)
            except ConfigurationError as e:
                raise TemplateError(f"failed to parse command: {e}") from e
            except (KeyError, IndexError, ValueError) as e:
                raise TemplateError(f"failed to parse command: {e!r}") from e

            if debug:
                logger.info(" ".join(command))

            try:
                process = await asyncio.create_subprocess_exec(
                    *command,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE if debug else asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                )
            except OSError as e:
                error = ServiceError(f"failed to run command: {e}")
                if debug:
                    logger.error(f"ERROR: {error}")
                raise error from e

            if debug and process.stdout is not None:
                self._stdout_task = asyncio.create_task(self._stream_stdout(process.stdout))

            self._process = process
            self._base_url = url
            logger.info(f"Started {command[0]} (pid {process.pid}) at {url}")

    async def stop(self) -> None:
        """
        Terminate the driver process and wait for it to exit.

        POSIX systems get SIGTERM; Windows gets a forced kill, since many
        drivers ignore other stop requests there.

        Raises:
            AlreadyStoppedError: If the process is not running
            ServiceError: If the process cannot be signalled
        """
        async with self._lock:
            process = self._process
            if process is None:
                raise AlreadyStoppedError()

            if process.returncode is None:
                try:
                    if sys.platform == "win32":
                        process.kill()
                    else:
                        process.terminate()
                except ProcessLookupError:
                    logger.debug(f"Process {process.pid} already exited")
                except OSError as e:
                    raise ServiceError(f"failed to stop command: {e}") from e

            try:
                await process.wait()
                await self._stop_stdout_task()
            finally:
                self._process = None
                self._base_url = ""
            logger.info(f"Stopped process {process.pid} (exit code {process.returncode})")

    async def wait_for_boot(self, timeout: float) -> None:
        """
        Wait until ``GET {url}/status`` answers 200.

        A background task polls the endpoint; it is cancelled and awaited
        before this method returns, whatever the outcome. Callers are
        responsible for stopping the process if boot fails.

        Args:
            timeout: Seconds to wait

        Raises:
            BootTimeoutError: If the service is not ready in time
        """
        booted = asyncio.Event()
        task = asyncio.create_task(self._poll_status(booted))
        try:
            await asyncio.wait_for(booted.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            raise BootTimeoutError(timeout) from None
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _poll_status(self, booted: asyncio.Event) -> None:
        """Probe the status endpoint every poll interval until it is up."""
        # Driver is local; ignore proxy settings from the environment
        async with httpx.AsyncClient(timeout=self._status_timeout, trust_env=False) as client:
            while not await self._check_status(client):
                await asyncio.sleep(self._poll_interval)
        booted.set()

    async def _check_status(self, client: httpx.AsyncClient) -> bool:
        async with self._lock:
            base_url = self._base_url
        try:
            response = await client.get(f"{base_url}/status")
        except (httpx.HTTPError, httpx.InvalidURL):
            return False
        return response.status_code == 200

    async def _stream_stdout(self, stdout: asyncio.StreamReader) -> None:
        """
        Log driver stdout line by line until EOF.

        Output is read in chunks so the pipe keeps draining; lines longer
        than STDOUT_CHUNK_SIZE are logged in pieces.
        """
        pending = b""
        while True:
            chunk = await stdout.read(STDOUT_CHUNK_SIZE)
            if not chunk:
                break
            *lines, pending = (pending + chunk).split(b"\n")
            for line in lines:
                _log_stdout_line(line)
            if len(pending) >= STDOUT_CHUNK_SIZE:
                _log_stdout_line(pending)
                pending = b""
        if pending:
            _log_stdout_line(pending)

    async def _stop_stdout_task(self) -> None:
        task, self._stdout_task = self._stdout_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"Error reading driver output: {e!r}")


def _log_stdout_line(line: bytes) -> None:
    logger.info(line.decode("utf-8", errors="replace").rstrip())
