"""
Command dispatch and confirmation tracking.

The platform acknowledges an RPC without guaranteeing the actuator
moved. After dispatch, the dispatcher reads the reported attribute at a
few fixed offsets until it matches the expected value or the deadline
for the actuator class passes.
"""
import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

from ...config import CommandSettings, get_settings
from ...domain.entities.command import (
    CommandDescriptor,
    CommandState,
    MotorCommand,
    PendingCommand,
)
from ...domain.entities.session import DeviceTarget
from ...domain.exceptions import (
    DomainException,
    PlatformConnectionError,
    PlatformError,
    PlatformTimeoutError,
)
from ...domain.services.command_catalog import CommandCatalog
from ...domain.services.value_matching import default_expected_value, values_match
from ...infrastructure.platform.thingsboard_client import ThingsBoardClient

logger = logging.getLogger(__name__)

# Gateway statuses after which the device may still have received the RPC
SOFT_TIMEOUT_STATUSES = (408, 504)


def rpc_may_have_arrived(error: PlatformError) -> bool:
    """Check if a failed RPC send may still have reached the device."""
    if isinstance(error, PlatformTimeoutError):
        return True
    return isinstance(error, PlatformConnectionError) and error.status_code in SOFT_TIMEOUT_STATUSES


class CommandDispatcher:
    """
    Sends commands to one device and tracks their confirmation.

    Per method: Idle -> Sent -> Confirming -> Confirmed | TimedOut, or
    Sent -> DispatchFailed. A newer dispatch of the same method
    supersedes the live one, whose callbacks then never fire.

    Callbacks may be plain functions or coroutine functions:
    - on_success(method)
    - on_timeout(method)
    - on_error(method, message)
    """

    def __init__(
        self,
        client: ThingsBoardClient,
        target: DeviceTarget,
        catalog: Optional[CommandCatalog] = None,
        settings: Optional[CommandSettings] = None,
        on_success: Optional[Callable] = None,
        on_timeout: Optional[Callable] = None,
        on_error: Optional[Callable] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            client: Platform client.
            target: Device that receives the commands.
            catalog: Method to confirmation mapping.
            settings: Command timing settings.
        """
        self.client = client
        self.target = target
        self.catalog = catalog or CommandCatalog()
        self.settings = settings or get_settings().commands

        self._on_success = on_success
        self._on_timeout = on_timeout
        self._on_error = on_error

        # Live commands per method; guarded by _lock
        self._pending: Dict[str, PendingCommand] = {}
        self._lock = asyncio.Lock()

        # Last terminal outcome per method
        self._outcomes: Dict[str, CommandState] = {}
        self._errors: Dict[str, str] = {}
        self._params: Dict[str, Any] = {}

        self._running = True

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def send_command(
        self,
        method: str,
        params: Any,
        expected_value: Any = None,
    ) -> bool:
        """
        Send a command and start tracking its confirmation.

        Args:
            method: RPC method name, e.g. ``set_fan_1_cmd``.
            params: RPC params as the controller expects them.
            expected_value: Attribute value that confirms the command.
                Defaults to the boolean the params encode. For motor
                methods, the motor command whose flags confirm it.

        Returns:
            True if the platform accepted the RPC, False on dispatch failure.
        """
        descriptor = self.catalog.resolve(method)

        if descriptor.is_compound:
            return await self.send_motor_command(method, params, expected=expected_value)

        if expected_value is None:
            expected_value = default_expected_value(params)

        expected = {key: expected_value for key in descriptor.attribute_keys}
        return await self._dispatch(descriptor, params, expected)

    async def send_motor_command(
        self,
        method: str,
        command: Any,
        expected: Any = None,
    ) -> bool:
        """
        Send a motor command (0=stop, 1=forward, 2=reverse).

        Confirmed when both direction flags match jointly. ``expected``
        names the motor command the flags should report; defaults to
        ``command``.

        Raises:
            ValueError: If ``command`` or ``expected`` is not a motor
                command or ``method`` is not a motor method.
        """
        motor_command = MotorCommand(int(command))
        expected_command = motor_command if expected is None else MotorCommand(int(expected))
        descriptor = self.catalog.resolve(method)
        if not descriptor.is_compound:
            raise ValueError(f"{method} is not a motor command")

        fw_key, re_key = descriptor.attribute_keys
        fw, re = expected_command.expected_flags
        return await self._dispatch(
            descriptor,
            motor_command.value,
            {fw_key: fw, re_key: re},
        )

    async def _dispatch(
        self,
        descriptor: CommandDescriptor,
        params: Any,
        expected: Dict[str, Any],
    ) -> bool:
        method = descriptor.method

        if not self._running:
            logger.warning(f"Dispatcher for {self.target} is shut down, dropping {method}")
            return False

        loop = asyncio.get_running_loop()
        pending = PendingCommand(
            command_id=method,
            descriptor=descriptor,
            params=params,
            expected=expected,
            started_at=loop.time(),
            deadline=self._deadline_for(descriptor),
        )

        async with self._lock:
            self._supersede(method)
            self._pending[method] = pending
            self._params[method] = params

        try:
            if self.settings.check_online:
                await self.client.ensure_online(self.target)
            try:
                await self.client.send_rpc(self.target, method, params)
            except PlatformError as e:
                if not rpc_may_have_arrived(e):
                    raise
                logger.info(f"RPC {method} to {self.target} timed out in transit, awaiting attribute sync: {e.message}")

        except DomainException as e:
            async with self._lock:
                if self._pending.get(method) is pending:
                    del self._pending[method]
                failed = pending.transition(CommandState.DISPATCH_FAILED, e.message)
                if failed:
                    self._outcomes[method] = CommandState.DISPATCH_FAILED
                    self._errors[method] = e.message

            if failed:
                logger.warning(f"Dispatch of {method} to {self.target} failed: {e.message}")
                await self._invoke(self._on_error, method, e.message)
            return False

        if pending.is_resolved or not self._running:
            # Superseded or shut down while the RPC was in flight
            return True

        if descriptor.confirmable:
            pending.transition(CommandState.CONFIRMING)
            pending.task = asyncio.create_task(
                self._confirm(pending),
                name=f"confirm_{self.target.device_id}_{method}",
            )
        else:
            logger.debug(f"No confirmation mapping for {method}, settling")
            pending.task = asyncio.create_task(
                self._settle(pending),
                name=f"settle_{self.target.device_id}_{method}",
            )

        return True

    def _supersede(self, method: str) -> None:
        """Cancel the live instance of ``method``. Caller holds the lock."""
        previous = self._pending.pop(method, None)
        if previous is None:
            return

        previous.transition(CommandState.SUPERSEDED)
        if previous.task is not None and not previous.task.done():
            previous.task.cancel()
        logger.info(f"{method} on {self.target} superseded by a newer dispatch")

    def _deadline_for(self, descriptor: CommandDescriptor) -> float:
        if not descriptor.confirmable:
            return self.settings.settle_delay
        if descriptor.is_compound:
            return self.settings.compound_ttl
        return self.settings.simple_ttl

    # =========================================================================
    # Confirmation
    # =========================================================================

    async def _confirm(self, pending: PendingCommand) -> None:
        loop = asyncio.get_running_loop()
        deadline_at = pending.started_at + pending.deadline

        try:
            confirmed = await asyncio.wait_for(
                self._run_checks(pending),
                timeout=max(deadline_at - loop.time(), 0),
            )
        except asyncio.TimeoutError:
            confirmed = False

        if not confirmed:
            # Checks exhausted early; the outcome is still reported at the deadline
            remaining = deadline_at - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)

        await self._resolve(
            pending,
            CommandState.CONFIRMED if confirmed else CommandState.TIMED_OUT,
        )

    async def _run_checks(self, pending: PendingCommand) -> bool:
        loop = asyncio.get_running_loop()

        for offset in self.settings.check_offsets:
            delay = pending.started_at + offset - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)

            if await self._check(pending):
                return True

        return False

    async def _check(self, pending: PendingCommand) -> bool:
        try:
            attrs = await self.client.get_attributes(self.target, list(pending.expected))
        except Exception as e:
            logger.warning(f"Confirmation check for {pending.command_id} on {self.target} failed: {e}")
            return False

        return all(
            values_match(attrs.get(key), expected)
            for key, expected in pending.expected.items()
        )

    async def _settle(self, pending: PendingCommand) -> None:
        await asyncio.sleep(pending.deadline)
        await self._resolve(pending, CommandState.CONFIRMED)

    async def _resolve(self, pending: PendingCommand, state: CommandState) -> None:
        method = pending.command_id

        async with self._lock:
            if not self._running:
                return
            if not pending.transition(state):
                return
            if self._pending.get(method) is pending:
                del self._pending[method]
            self._outcomes[method] = state

        if state == CommandState.CONFIRMED:
            logger.info(f"{method} on {self.target} confirmed")
            await self._invoke(self._on_success, method)
        else:
            logger.warning(f"{method} on {self.target} not confirmed within {pending.deadline}s")
            await self._invoke(self._on_timeout, method)

    async def _invoke(self, callback: Optional[Callable], *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in command callback for {args[0]}: {e}")

    # =========================================================================
    # Queries
    # =========================================================================

    def is_pending(self, method: str) -> bool:
        return method in self._pending

    @property
    def pending_methods(self) -> List[str]:
        return list(self._pending)

    @property
    def is_any_pending(self) -> bool:
        return bool(self._pending)

    def get_pending(self, method: str) -> Optional[PendingCommand]:
        return self._pending.get(method)

    def last_outcome(self, method: str) -> Optional[CommandState]:
        """Last terminal outcome of ``method``, None if it never resolved."""
        return self._outcomes.get(method)

    def last_error(self, method: str) -> Optional[str]:
        """Message of the last dispatch failure of ``method``."""
        return self._errors.get(method)

    def last_params(self, method: str) -> Any:
        """Params of the latest dispatch of ``method``."""
        return self._params.get(method)

    async def wait_for_outcome(
        self,
        method: str,
        timeout: Optional[float] = None,
    ) -> Optional[CommandState]:
        """
        Wait for the live instance of ``method`` to resolve.

        Follows superseding dispatches. Returns the last outcome right away
        if nothing is pending.

        Raises:
            asyncio.TimeoutError: If ``timeout`` elapses first.
        """
        async def _wait() -> Optional[CommandState]:
            while True:
                pending = self._pending.get(method)
                if pending is None:
                    return self._outcomes.get(method)
                await pending.resolved.wait()
                if pending.state != CommandState.SUPERSEDED:
                    return pending.state

        return await asyncio.wait_for(_wait(), timeout=timeout)

    # =========================================================================
    # Callbacks and lifecycle
    # =========================================================================

    def set_on_success(self, callback: Callable) -> None:
        """Set callback for confirmed commands."""
        self._on_success = callback

    def set_on_timeout(self, callback: Callable) -> None:
        """Set callback for unconfirmed commands."""
        self._on_timeout = callback

    def set_on_error(self, callback: Callable) -> None:
        """Set callback for dispatch failures."""
        self._on_error = callback

    @property
    def is_running(self) -> bool:
        return self._running

    async def shutdown(self) -> None:
        """Cancel every in-flight confirmation. No callback fires afterwards."""
        self._running = False

        async with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()

        tasks = []
        for command in pending:
            command.transition(CommandState.SUPERSEDED)
            if command.task is not None and not command.task.done():
                command.task.cancel()
                tasks.append(command.task)

        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        if pending:
            logger.info(f"Dispatcher for {self.target} shut down, {len(pending)} command(s) dropped")
