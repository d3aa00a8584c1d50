"""
Control log recording.

Turns the terminal outcomes of a dispatcher into control log entries.
"""
import logging
from typing import Optional
from uuid import UUID

from ...application.interfaces.unit_of_work import UnitOfWorkFactory
from ...domain.entities.command import CommandState
from ...domain.entities.control_log import ControlLogEntry
from .command_dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


class ControlLogRecorder:
    """
    Writes one control log entry per resolved command of a greenhouse.

    Superseded commands never resolve, so only the latest dispatch of a
    method is logged.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        greenhouse_id: UUID,
        dispatcher: CommandDispatcher,
    ):
        self._uow_factory = uow_factory
        self.greenhouse_id = greenhouse_id
        self.dispatcher = dispatcher

    def attach(self) -> None:
        """Register as the dispatcher's outcome callbacks."""
        self.dispatcher.set_on_success(self.on_success)
        self.dispatcher.set_on_timeout(self.on_timeout)
        self.dispatcher.set_on_error(self.on_error)

    async def on_success(self, method: str) -> None:
        await self.record(method, CommandState.CONFIRMED)

    async def on_timeout(self, method: str) -> None:
        await self.record(method, CommandState.TIMED_OUT)

    async def on_error(self, method: str, message: str) -> None:
        await self.record(method, CommandState.DISPATCH_FAILED, message)

    async def record(
        self,
        method: str,
        outcome: CommandState,
        error_message: Optional[str] = None,
    ) -> ControlLogEntry:
        entry = ControlLogEntry(
            greenhouse_id=self.greenhouse_id,
            method=method,
            params=self.dispatcher.last_params(method),
            outcome=outcome,
            error_message=error_message,
            device_name=self.dispatcher.target.name,
        )

        async with self._uow_factory() as uow:
            await uow.control_logs.add(entry)
            await uow.commit()

        logger.debug(f"Recorded {outcome.value} for {method} on {self.dispatcher.target}")
        return entry
