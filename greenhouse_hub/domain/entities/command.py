"""
Actuator command entities.

Commands are RPCs sent to a greenhouse controller through the platform.
The platform only acknowledges receipt, so a dispatched command stays
pending until a reported attribute confirms it or its deadline passes.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ActuatorClass(str, Enum):
    """Actuator families with different confirmation deadlines."""
    SIMPLE = "simple"      # single flag: relays, auto switches, timer settings
    COMPOUND = "compound"  # two flags that must agree: bidirectional motors


class CommandState(str, Enum):
    """Command confirmation state."""
    IDLE = "idle"
    SENT = "sent"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timed_out"
    DISPATCH_FAILED = "dispatch_failed"
    SUPERSEDED = "superseded"

    @property
    def is_terminal(self) -> bool:
        return self in (
            CommandState.CONFIRMED,
            CommandState.TIMED_OUT,
            CommandState.DISPATCH_FAILED,
            CommandState.SUPERSEDED,
        )


class MotorCommand(int, Enum):
    """Three-way motor command, encoded 0/1/2 on the wire."""
    STOP = 0
    FORWARD = 1
    REVERSE = 2

    @property
    def expected_flags(self) -> Tuple[bool, bool]:
        """Expected (forward, reverse) flag pair once the motor obeys."""
        if self is MotorCommand.FORWARD:
            return True, False
        if self is MotorCommand.REVERSE:
            return False, True
        return False, False


@dataclass(frozen=True)
class CommandDescriptor:
    """
    How a given RPC method is confirmed.

    ``confirmable`` is explicit so that fire-and-forget methods are
    visible in the catalog instead of being implied by a missing entry.
    """
    method: str
    actuator_class: ActuatorClass = ActuatorClass.SIMPLE
    confirmable: bool = False
    attribute_keys: Tuple[str, ...] = ()

    @property
    def is_compound(self) -> bool:
        return self.actuator_class == ActuatorClass.COMPOUND


@dataclass(eq=False)
class PendingCommand:
    """
    A dispatched command awaiting confirmation.

    Owned by the dispatcher; at most one live instance per command_id.
    """
    command_id: str
    descriptor: CommandDescriptor
    params: Any
    expected: Dict[str, Any]  # attribute key -> expected value
    started_at: float  # loop time of dispatch
    deadline: float    # seconds after started_at
    state: CommandState = CommandState.SENT
    error_message: Optional[str] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    resolved: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def is_resolved(self) -> bool:
        return self.state.is_terminal

    def transition(self, state: CommandState, error_message: Optional[str] = None) -> bool:
        """
        Move to ``state``.

        Returns False if the command already reached a terminal state,
        so each dispatch resolves at most once.
        """
        if self.is_resolved:
            return False
        self.state = state
        if error_message is not None:
            self.error_message = error_message
        if state.is_terminal:
            self.resolved.set()
        return True
