"""
Command API endpoints.

Dispatches control commands and reports their confirmation state. A
command whose effect was not observed in time is "unconfirmed", never an
error: the actuator may still have switched.
"""
import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ..dependencies import get_device_target, get_hub
from ..schemas import (
    CommandAcceptedResponse,
    CommandRequest,
    CommandStatusResponse,
    ControlHistoryResponse,
    ControlLogResponse,
    PendingCommandsResponse,
)
from ...application.services.command_dispatcher import CommandDispatcher
from ...domain.entities.command import CommandState
from ...domain.entities.session import DeviceTarget
from ...domain.exceptions import ConfirmationTimeout
from ...hub import GreenhouseHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devices", tags=["Commands"])


def _current_state(dispatcher: CommandDispatcher, method: str) -> CommandState:
    pending = dispatcher.get_pending(method)
    if pending is not None:
        return pending.state
    return dispatcher.last_outcome(method) or CommandState.SENT


@router.post(
    "/{device_id}/commands",
    response_model=CommandAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send a command",
    description="Send a control command and track its confirmation.",
)
async def send_command(
    device_id: UUID,
    request: CommandRequest,
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
):
    """
    Send a command.

    Answers 503 when the device is offline and 502 when the platform
    rejects the RPC. With ``wait`` set, an unconfirmed outcome still
    answers 202 with error ``CONFIRMATION_TIMEOUT``.
    """
    await hub.client.ensure_online(target)

    dispatcher = hub.dispatcher_for(target, greenhouse_id=device_id)
    try:
        accepted = await dispatcher.send_command(
            request.method,
            request.params,
            expected_value=request.expected_value,
        )
    except (TypeError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid command {request.method}: {e}",
        )

    if not accepted:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                'error': 'DISPATCH_FAILED',
                'message': dispatcher.last_error(request.method) or f"Command {request.method} could not be sent",
                'details': {'method': request.method},
            },
        )

    if not request.wait:
        return CommandAcceptedResponse(
            accepted=True,
            method=request.method,
            state=_current_state(dispatcher, request.method).value,
        )

    pending = dispatcher.get_pending(request.method)
    timeout = request.wait_timeout
    if timeout is None:
        timeout = (pending.deadline if pending else 0) + 1.0

    try:
        outcome = await dispatcher.wait_for_outcome(request.method, timeout=timeout)
    except asyncio.TimeoutError:
        outcome = None

    if outcome == CommandState.CONFIRMED:
        return CommandAcceptedResponse(
            accepted=True,
            method=request.method,
            state=outcome.value,
        )

    unconfirmed = ConfirmationTimeout(request.method, pending.deadline if pending else None)
    return CommandAcceptedResponse(
        accepted=True,
        method=request.method,
        state=(outcome or _current_state(dispatcher, request.method)).value,
        error=unconfirmed.code,
        message=unconfirmed.message,
    )


@router.get(
    "/{device_id}/commands",
    response_model=PendingCommandsResponse,
    summary="List pending commands",
)
async def list_pending_commands(
    device_id: UUID,
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> PendingCommandsResponse:
    dispatcher = hub.dispatcher_for(target, greenhouse_id=device_id)
    return PendingCommandsResponse(
        device_id=str(device_id),
        pending=dispatcher.pending_methods,
    )


@router.get(
    "/{device_id}/commands/{method}",
    response_model=CommandStatusResponse,
    summary="Get command status",
    description="Pending flag and last outcome of one control.",
)
async def get_command_status(
    device_id: UUID,
    method: str,
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> CommandStatusResponse:
    dispatcher = hub.dispatcher_for(target, greenhouse_id=device_id)
    pending = dispatcher.get_pending(method)
    outcome = dispatcher.last_outcome(method)

    return CommandStatusResponse(
        method=method,
        pending=pending is not None,
        state=pending.state.value if pending else None,
        last_outcome=outcome.value if outcome else None,
        last_error=dispatcher.last_error(method),
    )


@router.get(
    "/{device_id}/control-history",
    response_model=ControlHistoryResponse,
    summary="Get control history",
    description="Resolved commands of a greenhouse, newest first.",
)
async def get_control_history(
    device_id: UUID,
    limit: int = Query(default=50, ge=1, le=500),
    hub: GreenhouseHub = Depends(get_hub),
) -> ControlHistoryResponse:
    entries = await hub.control_history(device_id, limit=limit)
    return ControlHistoryResponse(
        device_id=str(device_id),
        entries=[
            ControlLogResponse(
                id=str(entry.id),
                method=entry.method,
                control_key=entry.control_key,
                params=entry.params,
                outcome=entry.outcome.value,
                success=entry.succeeded,
                error_message=entry.error_message,
                created_at=entry.created_at,
            )
            for entry in entries
        ],
    )
