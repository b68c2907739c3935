"""
Graceful shutdown coordination

Owns the process termination signal handlers and an ordered list of async
cleanup actions. Cleanups run once, last registered first, and the process
exits with status 0 when all of them succeeded or 1 when any failed.
"""

import asyncio
import signal
import sys
from typing import Awaitable, Callable, List, Optional, Tuple

from core.utils import get_logger

logger = get_logger(__name__)

Cleanup = Callable[[], Awaitable[None]]

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """Run registered cleanup actions once on termination"""

    def __init__(self, exit_func: Callable[[int], None] = sys.exit):
        self.exit_func = exit_func
        self.exit_code: Optional[int] = None
        self._cleanups: List[Tuple[str, Cleanup]] = []
        self._installed_signals: List[int] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self._requested: Optional[asyncio.Event] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def is_shutting_down(self) -> bool:
        return self._task is not None or self.exit_code is not None

    def register(self, name: str, cleanup: Cleanup) -> None:
        """Register a named cleanup action, ignoring duplicate names"""
        if any(existing == name for existing, _ in self._cleanups):
            logger.debug(f"Cleanup '{name}' already registered")
            return
        self._cleanups.append((name, cleanup))

    def unregister(self, name: str) -> None:
        self._cleanups = [(n, c) for n, c in self._cleanups if n != name]

    @property
    def cleanup_names(self) -> List[str]:
        return [name for name, _ in self._cleanups]

    def install_signal_handlers(self, signals=TERMINATION_SIGNALS) -> None:
        """Install termination handlers on the running event loop"""
        loop = asyncio.get_running_loop()
        self._loop = loop
        self._ensure_primitives()

        for sig in signals:
            if sig in self._installed_signals:
                continue
            if sys.platform == "win32":
                signal.signal(
                    sig, lambda s, _frame: loop.call_soon_threadsafe(self.handle_signal, s)
                )
            else:
                loop.add_signal_handler(sig, self.handle_signal, sig)
            self._installed_signals.append(sig)

        logger.debug(f"Shutdown handlers installed for {len(self._installed_signals)} signal(s)")

    def remove_signal_handlers(self) -> None:
        for sig in self._installed_signals:
            if sys.platform == "win32":
                signal.signal(sig, signal.SIG_DFL)
            elif self._loop is not None:
                self._loop.remove_signal_handler(sig)
        self._installed_signals = []

    def handle_signal(self, sig: int) -> None:
        """Start the shutdown once, later signals are ignored"""
        name = signal.Signals(sig).name
        if self.is_shutting_down:
            logger.warning(f"Received {name} while shutdown is already in progress, ignoring")
            return

        logger.info(f"🛑 Received {name}, shutting down...")
        loop = self._loop or asyncio.get_running_loop()
        self._ensure_primitives()
        self._requested.set()
        self._task = loop.create_task(self.terminate())

    async def terminate(self) -> None:
        """Run the cleanups then exit the process with their status"""
        code = await self.run_cleanups()
        self.exit_func(code)

    async def run_cleanups(self) -> int:
        """Run every cleanup once and return the resulting exit code"""
        self._ensure_primitives()
        async with self._lock:
            if self.exit_code is not None:
                return self.exit_code

            code = 0
            for name, cleanup in reversed(self._cleanups):
                try:
                    await cleanup()
                except Exception as e:
                    # Cleanups log their own failures
                    logger.debug(f"Cleanup '{name}' failed: {e}")
                    code = 1

            self.exit_code = code
            return code

    async def wait_for_shutdown(self) -> None:
        """Block until a shutdown has been requested and has finished"""
        self._ensure_primitives()
        await self._requested.wait()
        if self._task is not None:
            await self._task

    def _ensure_primitives(self) -> None:
        if self._requested is None:
            self._requested = asyncio.Event()
        if self._lock is None:
            self._lock = asyncio.Lock()


# Global coordinator used by the service entry point
shutdown_coordinator = ShutdownCoordinator()
