"""Persistent session helper for MCP servers."""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager

from mcp.client.session import ClientSession

from mcp_runtime.config.definitions import ServerDefinition
from mcp_runtime.constants import LOG_SESSION_EXITED, SESSION_CLOSE_TIMEOUT
from mcp_runtime.exceptions import MCPRuntimeError, TransportError

logger = logging.getLogger(__name__)


class _PersistentClient:
    """Keep one client session alive in a background task.

    The transport context manager is entered and exited inside the same task,
    which the underlying anyio task groups require. If the context ends on its
    own (the subprocess exits, the HTTP stream drops) the client is marked
    dead and ``start`` raises from then on.
    """

    def __init__(
        self,
        name: str,
        cm: AbstractAsyncContextManager[ClientSession],
        definition: ServerDefinition | None = None,
    ):
        self.name = name
        self.definition = definition
        self._cm = cm
        self._task: asyncio.Task | None = None
        self._start = asyncio.Event()
        self._stop = asyncio.Event()
        self._error: BaseException | None = None
        self.session: ClientSession | None = None

    @property
    def finished(self) -> bool:
        """True once the background task has ended, for whatever reason."""
        return self._task is not None and self._task.done()

    @property
    def error(self) -> BaseException | None:
        return self._error

    async def start(self) -> ClientSession:
        if self._task is None:
            self._task = asyncio.create_task(self._runner(), name=f"mcp-session-{self.name}")

        if not self._start.is_set():
            waiter = asyncio.create_task(self._start.wait())
            try:
                await asyncio.wait({waiter, self._task}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                waiter.cancel()

        if self.session is None:
            error = self._error
            if isinstance(error, MCPRuntimeError):
                raise error
            raise TransportError(
                f"Could not open session for MCP server '{self.name}': {error or 'session closed'}",
                server=self.name,
            ) from error
        return self.session

    async def _runner(self) -> None:
        try:
            async with self._cm as client:
                self.session = client
                self._start.set()
                await self._stop.wait()
        except Exception as exc:  # noqa: BLE001 - surfaced through start()/error
            self._error = exc
            if not self._stop.is_set():
                logger.warning(LOG_SESSION_EXITED.format(name=self.name, error=exc))
        finally:
            self.session = None

    async def close(self, timeout: float = SESSION_CLOSE_TIMEOUT) -> None:
        if self._task is None or self._task.done():
            return
        self._stop.set()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except TimeoutError:
            logger.warning("Timeout closing MCP server '%s' after %s seconds; cancelling", self.name, timeout)
            self._task.cancel()
