# bonsai_gateway/core/registry.py
from __future__ import annotations
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Optional
import asyncio, json, logging, os, tempfile, threading

from bonsai_gateway.config import get_settings
from bonsai_gateway.core.errors import ConflictError
from bonsai_gateway.core.models import ScrapingJob

logger = logging.getLogger("bonsai.mcp")


class AlreadyInstalled(ConflictError):
    def __init__(self, server_id: str):
        super().__init__("Server is already installed", 409)
        self.server_id = server_id


class NotInstalled(ConflictError):
    def __init__(self, server_id: str):
        super().__init__("Server is not installed", 404)
        self.server_id = server_id


class AlreadyRunning(ConflictError):
    def __init__(self, server_id: str):
        super().__init__("Server is already running", 409)
        self.server_id = server_id


class NotRunning(ConflictError):
    def __init__(self, server_id: str):
        super().__init__("Server is not running", 404)
        self.server_id = server_id


def _is_id_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(s, str) for s in value)


class McpRegistry:
    """
    Installed/running MCP server ids.

    Each operation reserves the id under the lock, awaits the simulated
    provisioning step outside it, then commits under the lock again. A
    reservation blocks concurrent requests for the same id and is dropped
    if provisioning fails, leaving the sets untouched. When ``path`` is set
    the sets are written to it as JSON on every commit.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        install_delay: float = 2.0,
        start_delay: float = 1.0,
        stop_delay: float = 0.5,
    ):
        self.path = Path(path) if path else None
        self.install_delay = install_delay
        self.start_delay = start_delay
        self.stop_delay = stop_delay
        self._lock = threading.Lock()
        self._installed: list[str] = []
        self._running: list[str] = []
        self._pending: set[tuple[str, str]] = set()
        if self.path is not None:
            self._load()

    # ---------- persistence ----------
    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable registry file %s: %s", self.path, e)
            return
        if not isinstance(data, dict):
            logger.warning("Ignoring registry file %s: expected an object, got %s", self.path, type(data).__name__)
            return
        installed, running = data.get("installed", []), data.get("running", [])
        if not (_is_id_list(installed) and _is_id_list(running)):
            logger.warning("Ignoring registry file %s: installed/running must be lists of ids", self.path)
            return
        installed = list(dict.fromkeys(installed))
        # running must stay a subset of installed
        running = [s for s in dict.fromkeys(running) if s in installed]
        self._installed, self._running = installed, running
        logger.info("Loaded MCP registry installed=%d running=%d", len(installed), len(running))

    def _write(self, installed: list[str], running: list[str]) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".mcp_registry.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"installed": installed, "running": running}, f)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _commit(self, installed: list[str], running: list[str]) -> None:
        # caller holds the lock; write first so a failed write changes nothing
        self._write(installed, running)
        self._installed, self._running = installed, running

    async def _simulate(self, action: str, server_id: str, delay: float) -> None:
        # stands in for download/process start/shutdown of the server
        await asyncio.sleep(delay)

    @contextmanager
    def _reservation(self, key: tuple[str, str]):
        try:
            yield
        finally:
            with self._lock:
                self._pending.discard(key)

    # ---------- operations ----------
    async def install(self, server_id: str) -> None:
        key = ("install", server_id)
        with self._lock:
            if server_id in self._installed or key in self._pending:
                raise AlreadyInstalled(server_id)
            self._pending.add(key)

        with self._reservation(key):
            logger.info("Installing MCP server: %s", server_id)
            await self._simulate("install", server_id, self.install_delay)
            with self._lock:
                self._commit(self._installed + [server_id], list(self._running))
        logger.info("Successfully installed MCP server: %s", server_id)

    async def start(self, server_id: str) -> None:
        key = ("start", server_id)
        with self._lock:
            if server_id not in self._installed:
                raise NotInstalled(server_id)
            if server_id in self._running or key in self._pending:
                raise AlreadyRunning(server_id)
            self._pending.add(key)

        with self._reservation(key):
            logger.info("Starting MCP server: %s", server_id)
            await self._simulate("start", server_id, self.start_delay)
            with self._lock:
                self._commit(list(self._installed), self._running + [server_id])
        logger.info("Successfully started MCP server: %s", server_id)

    async def stop(self, server_id: str) -> None:
        key = ("stop", server_id)
        with self._lock:
            if server_id not in self._running or key in self._pending:
                raise NotRunning(server_id)
            self._pending.add(key)

        with self._reservation(key):
            logger.info("Stopping MCP server: %s", server_id)
            await self._simulate("stop", server_id, self.stop_delay)
            with self._lock:
                self._commit(list(self._installed), [s for s in self._running if s != server_id])
        logger.info("Successfully stopped MCP server: %s", server_id)

    def list(self) -> dict:
        with self._lock:
            return {
                "servers": list(self._installed),
                "running": list(self._running),
                "total_installed": len(self._installed),
                "total_running": len(self._running),
            }


class ScrapingJobSlot:
    """Holds at most one scraping job; a new one may start once the last finished."""

    def __init__(self):
        self._lock = threading.Lock()
        self._job: Optional[ScrapingJob] = None

    @property
    def current(self) -> Optional[ScrapingJob]:
        return self._job

    def claim(self, sources: list[str]) -> ScrapingJob:
        with self._lock:
            if self._job is not None and self._job.is_running:
                raise ConflictError("Another scraping job is already running")
            self._job = ScrapingJob(sources=list(sources))
            return self._job


@lru_cache(maxsize=1)
def get_mcp_registry() -> McpRegistry:
    s = get_settings()
    return McpRegistry(
        path=Path(s.MCP_REGISTRY_PATH) if s.MCP_REGISTRY_PATH else None,
        install_delay=s.MCP_INSTALL_DELAY_MS / 1000.0,
        start_delay=s.MCP_START_DELAY_MS / 1000.0,
        stop_delay=s.MCP_STOP_DELAY_MS / 1000.0,
    )


@lru_cache(maxsize=1)
def get_scraping_slot() -> ScrapingJobSlot:
    return ScrapingJobSlot()
