"""
Interaction orchestrator.

Dispatches verified interactions by kind. Anything that fits in one fast
record store call is answered inline; slower work (re-running functions,
counting many tables) is acknowledged immediately with a deferred
response and finished in a background task that edits the original
message when done.
"""

from typing import Optional, Tuple

from fastapi import BackgroundTasks

from app.models.interaction import (
    Interaction,
    InteractionResponse,
    InteractionResponseType,
    InteractionType,
)
from app.services import messages
from app.services.audit_aggregator import AuditAggregator
from app.services.error_records import ErrorRecordRepository
from app.services.retry_coordinator import RetryCoordinator
from app.utils.business_day import format_business_day, parse_business_day, yesterday
from app.utils.logging import get_logger
from app.utils.resilience import run_detached

logger = get_logger(__name__)

AUDIT_COMMAND_NAME = "audit"


class UnsupportedInteractionError(ValueError):
    """Raised for interaction kinds this service does not handle."""
    pass


def parse_custom_id(custom_id: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Split a component id of the form ``<action>:<param>``.

    Returns:
        (action, param), or None when either part is missing
    """
    action, separator, param = (custom_id or "").partition(":")
    if not separator or not action or not param:
        return None
    return action, param


class InteractionOrchestrator:
    """Routes interactions to the remediation components."""

    def __init__(
        self,
        repository: ErrorRecordRepository,
        retry_coordinator: RetryCoordinator,
        audit_aggregator: AuditAggregator,
    ):
        self._repository = repository
        self._retry = retry_coordinator
        self._audit = audit_aggregator

    async def handle(
        self,
        interaction: Interaction,
        background_tasks: BackgroundTasks,
    ) -> InteractionResponse:
        """
        Answer an interaction.

        Args:
            interaction: Verified and parsed interaction
            background_tasks: Tasks run after the response has been sent

        Returns:
            The synchronous response

        Raises:
            UnsupportedInteractionError: For unknown interaction kinds
        """
        if interaction.type == InteractionType.PING:
            return InteractionResponse(type=InteractionResponseType.PONG)

        if interaction.type == InteractionType.APPLICATION_COMMAND:
            return self._handle_command(interaction, background_tasks)

        if interaction.type == InteractionType.MESSAGE_COMPONENT:
            return await self._handle_component(interaction, background_tasks)

        raise UnsupportedInteractionError(f"Unhandled interaction type: {interaction.type}")

    def _handle_command(
        self,
        interaction: Interaction,
        background_tasks: BackgroundTasks,
    ) -> InteractionResponse:
        name = interaction.data.name if interaction.data else None

        if name != AUDIT_COMMAND_NAME:
            logger.warning(f"Unknown command: {name!r}")
            return InteractionResponse(
                type=InteractionResponseType.CHANNEL_MESSAGE,
                data=messages.unknown_command(name or ""),
            )

        business_day = yesterday()
        logger.info("Audit requested", extra={"business_day": business_day})
        background_tasks.add_task(
            run_detached,
            f"audit:{business_day}",
            self._audit.run,
            interaction.token,
            business_day,
        )
        return InteractionResponse(type=InteractionResponseType.DEFERRED_CHANNEL_MESSAGE)

    async def _handle_component(
        self,
        interaction: Interaction,
        background_tasks: BackgroundTasks,
    ) -> InteractionResponse:
        custom_id = interaction.data.custom_id if interaction.data else None
        parsed = parse_custom_id(custom_id)
        if parsed is None:
            logger.warning(f"Malformed component id: {custom_id!r}")
            return self._update(messages.invalid_button())

        action, param = parsed
        if action not in (messages.RETRY_ALL_ACTION, messages.REJECT_ALL_ACTION):
            logger.warning(f"Unknown component action: {action!r}")
            return self._update(messages.unknown_action())

        day = parse_business_day(param)
        if day is None:
            logger.warning(f"Component {action} carries an invalid date: {param!r}")
            return self._update(messages.invalid_button())
        business_day = format_business_day(day)

        if action == messages.RETRY_ALL_ACTION:
            return await self._retry_all(business_day, interaction.token, background_tasks)
        return await self._reject_all(business_day)

    async def _retry_all(
        self,
        business_day: str,
        token: str,
        background_tasks: BackgroundTasks,
    ) -> InteractionResponse:
        errors = await self._retry.find_retryable(business_day)
        if not errors:
            logger.info(f"Nothing to retry for {business_day}", extra={"business_day": business_day})
            return self._update(messages.nothing_to_retry(business_day))

        logger.info(
            f"Retrying {len(errors)} errors for {business_day}",
            extra={"business_day": business_day},
        )
        background_tasks.add_task(
            run_detached,
            f"retry_all:{business_day}",
            self._retry.retry_all,
            business_day,
            errors,
            token,
        )
        return InteractionResponse(type=InteractionResponseType.DEFERRED_UPDATE_MESSAGE)

    async def _reject_all(self, business_day: str) -> InteractionResponse:
        if await self._repository.delete_open_for_day(business_day):
            return self._update(messages.errors_dismissed(business_day))
        return self._update(messages.dismiss_failed(business_day))

    @staticmethod
    def _update(message) -> InteractionResponse:
        return InteractionResponse(type=InteractionResponseType.UPDATE_MESSAGE, data=message)
