"""Generic miIO device model with property loading and command execution."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from ..exceptions import CommandRejected, DeviceCommunicationError
from ..models import ChangeEvent
from ..properties import PropertyRegistry, Transform
from ..state_manager import PropertyStateManager

logger = logging.getLogger(__name__)

PropertyListener = Callable[[ChangeEvent], Awaitable[None] | None]
SignalListener = Callable[[str, Any], Awaitable[None] | None]


def check_result(method: str, result: Any) -> Any:
    """Validate a command acknowledgement.

    Older firmware answers ``0``, newer firmware answers ``["ok", ...]``.
    Anything after the leading "ok" is passed through unexamined.

    Raises:
        CommandRejected: if ``result`` matches neither encoding
    """
    if isinstance(result, int) and not isinstance(result, bool) and result == 0:
        return result
    if isinstance(result, list | tuple) and result and result[0] == "ok":
        return result
    raise CommandRejected(method, result)


class MiioDevice:
    """Base class for miIO device models.

    Subclasses declare their properties in ``__init__`` and react to changes
    by overriding ``property_updated``.
    """

    def __init__(self, transport: Any, config: dict[str, Any] | None = None):
        """Initialize the device model.

        Args:
            transport: Object exposing ``async send(method, params)`` that
                returns the ``result`` member of the device reply
            config: Device configuration section
        """
        self.transport = transport
        self.config = config or {}

        self.monitor_interval = self.config.get("monitor_interval", 60)
        self.call_timeout = self.config.get("call_timeout", 10.0)

        self.schema = PropertyRegistry()
        self.state_manager = PropertyStateManager()

        self._signals: dict[str, Any] = {}
        self._pending_signals: list[tuple[str, Any]] = []
        self._property_listeners: list[PropertyListener] = []
        self._signal_listeners: list[SignalListener] = []

        self._running = False
        self._monitor_task: asyncio.Task | None = None
        self._refresh_tasks: set[asyncio.Task] = set()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    # Properties

    def define_property(
        self, raw_key: str, name: str | None = None, transform: Transform | None = None
    ) -> None:
        """Declare a device property, see ``PropertyRegistry.define``."""
        self.schema.define(raw_key, name=name, transform=transform)

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return the cached value of property ``name``."""
        return self.state_manager.get(name, default)

    @property
    def properties(self) -> dict[str, Any]:
        """Return a copy of the current property snapshot."""
        return self.state_manager.snapshot()

    async def load_properties(self, names: list[str]) -> dict[str, Any]:
        """Fetch ``names`` from the device and return public-name keyed values.

        The default uses ``get_prop`` with one raw key per requested name and
        a positional reply. Devices that expose their state differently
        override this.
        """
        raw_keys = [self.schema.to_raw_key(name) for name in names]
        result = await self.call("get_prop", raw_keys)
        if not isinstance(result, list | tuple):
            raise DeviceCommunicationError("get_prop", f"unexpected reply {result!r}")
        merged = dict(zip(raw_keys, result))
        return self.schema.project(raw_keys, merged)

    async def refresh(self, names: Iterable[str] | None = None) -> list[ChangeEvent]:
        """Run one fetch cycle for ``names`` (all declared properties by default).

        Returns:
            The change events dispatched for this cycle

        Raises:
            DeviceCommunicationError: if the fetch failed; the snapshot is
                left unchanged
        """
        requested = list(names) if names else self.schema.names
        sequence = self.state_manager.next_sequence()
        logger.debug(f"Fetch #{sequence}: {requested}")

        values = await self.load_properties(requested)
        ordered = {name: values[name] for name in self.schema.order(values)}
        changes = self.state_manager.apply(sequence, ordered)
        await self._dispatch(changes)
        return changes

    # Change dispatch

    def property_updated(self, event: ChangeEvent) -> None:
        """Hook called for every property change, in declaration order."""

    async def _dispatch(self, changes: list[ChangeEvent]) -> None:
        for event in changes:
            logger.debug(f"Property {event.name}: {event.old_value!r} -> {event.new_value!r}")
            self.property_updated(event)
            for listener in list(self._property_listeners):
                await self._notify(listener, event)
            await self._flush_signals()

    async def _flush_signals(self) -> None:
        pending, self._pending_signals = self._pending_signals, []
        for name, value in pending:
            for listener in list(self._signal_listeners):
                await self._notify(listener, name, value)

    async def _notify(self, listener: Callable[..., Any], *args: Any) -> None:
        try:
            result = listener(*args)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"Error calling listener {getattr(listener, '__name__', listener)}: {e}")

    def on_property_change(self, listener: PropertyListener) -> None:
        """Register a callback receiving every ``ChangeEvent``."""
        if listener not in self._property_listeners:
            self._property_listeners.append(listener)

    def on_signal_change(self, listener: SignalListener) -> None:
        """Register a callback receiving ``(signal, value)`` on signal changes."""
        if listener not in self._signal_listeners:
            self._signal_listeners.append(listener)

    def remove_listener(self, listener: Callable[..., Any]) -> None:
        if listener in self._property_listeners:
            self._property_listeners.remove(listener)
        if listener in self._signal_listeners:
            self._signal_listeners.remove(listener)

    # Signals

    def signal(self, name: str, default: Any = None) -> Any:
        """Return the current value of a derived signal."""
        return self._signals.get(name, default)

    def update_signal(self, name: str, value: Any) -> bool:
        """Set signal ``name`` and queue a notification when it changed."""
        if name in self._signals and self._signals[name] == value:
            return False
        self._signals[name] = value
        self._pending_signals.append((name, value))
        logger.debug(f"Signal {name} = {value!r}")
        return True

    # Remote calls

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Send a remote call and return the device result unvalidated.

        Raises:
            DeviceCommunicationError: on transport failure or timeout
        """
        params = [] if params is None else params
        try:
            return await asyncio.wait_for(
                self.transport.send(method, params), timeout=self.call_timeout
            )
        except TimeoutError as e:
            raise DeviceCommunicationError(method, f"timed out after {self.call_timeout}s") from e
        except DeviceCommunicationError:
            raise
        except Exception as e:
            raise DeviceCommunicationError(method, str(e)) from e

    async def execute(
        self,
        method: str,
        params: list[Any] | None = None,
        *,
        refresh: Iterable[str] | None = None,
        refresh_delay: float = 0,
    ) -> Any:
        """Send a command, validate the acknowledgement and schedule a refresh.

        Args:
            method: Remote method name
            params: Call arguments
            refresh: Property names to re-fetch once the command succeeded
            refresh_delay: Seconds to wait before the re-fetch

        Returns:
            The validated device result

        Raises:
            DeviceCommunicationError: on transport failure
            CommandRejected: if the acknowledgement is not a success
        """
        result = check_result(method, await self.call(method, params))
        logger.info(f"Command {method} {params or ''} accepted")
        if refresh:
            self.schedule_refresh(refresh, refresh_delay)
        return result

    def schedule_refresh(self, names: Iterable[str], delay: float = 0) -> asyncio.Task:
        """Re-fetch ``names`` after ``delay`` seconds without waiting for it."""
        task = asyncio.create_task(self._delayed_refresh(list(names), delay))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)
        return task

    async def _delayed_refresh(self, names: list[str], delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            await self.refresh(names)
        except Exception as e:
            logger.warning(f"Scheduled refresh of {names} failed: {e}")

    # Monitoring

    async def start(self) -> None:
        """Start polling every declared property in the background."""
        if self._running:
            return
        logger.info(f"Starting {type(self).__name__} monitor (every {self.monitor_interval}s)")
        self._running = True
        self._monitor_task = asyncio.create_task(self._monitor_loop())

    async def stop(self) -> None:
        """Stop the background poll. Scheduled refreshes are left to finish."""
        logger.info(f"Stopping {type(self).__name__} monitor")
        self._running = False
        if self._monitor_task is not None:
            self._monitor_task.cancel()
            await asyncio.gather(self._monitor_task, return_exceptions=True)
            self._monitor_task = None

    async def _monitor_loop(self) -> None:
        while self._running:
            try:
                await self.refresh()
            except DeviceCommunicationError as e:
                logger.warning(f"Poll failed, keeping previous snapshot: {e}")
            except Exception as e:
                logger.error(f"Unexpected error while polling: {e}")
            await asyncio.sleep(self.monitor_interval)
