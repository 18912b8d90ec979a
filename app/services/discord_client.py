"""
Discord client.

Sends channel messages with the bot credential and edits the original
response of an interaction through its one-time follow-up token.
"""

from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings
from app.models.interaction import MessagePayload
from app.utils.logging import get_logger
from app.utils.metrics import track_api_call
from app.utils.resilience import TransientError, retry_with_backoff

logger = get_logger(__name__)

AUDIT_COMMAND = {
    "name": "audit",
    "description": "Previous day summary: processed tables and record counts per function",
    "type": 1,  # CHAT_INPUT
}


class ChatPlatformError(Exception):
    """Raised when Discord rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChatPlatformUnavailableError(ChatPlatformError, TransientError):
    """Transport failure, rate limit or 5xx from Discord."""
    pass


class DiscordClient:
    """REST client for the Discord API."""

    def __init__(
        self,
        api_base_url: str = "https://discord.com/api/v10",
        bot_token: Optional[str] = None,
        channel_id: Optional[str] = None,
        application_id: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_base_url = api_base_url.rstrip("/")
        self._bot_token = bot_token
        self._channel_id = channel_id
        self._application_id = application_id
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "DiscordClient":
        return cls(
            api_base_url=settings.discord_api_base_url,
            bot_token=settings.discord_bot_token,
            channel_id=settings.discord_channel_id,
            application_id=settings.discord_application_id,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        body: Any,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if authenticated:
            if not self._bot_token:
                raise ChatPlatformError("Discord bot token is not configured")
            headers["Authorization"] = f"Bot {self._bot_token}"

        async with httpx.AsyncClient(
            base_url=self._api_base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            # Follow-up tokens are credentials; keep them out of the logs
            log_path = "/webhooks/.../messages/@original" if path.startswith("/webhooks/") else path
            async with track_api_call(None, "discord", logger, method, log_path) as call:
                try:
                    response = await client.request(method, path, json=body, headers=headers)
                except httpx.HTTPError as e:
                    raise ChatPlatformUnavailableError(f"{method} {log_path} failed: {e}") from e

                call["status_code"] = response.status_code

                if response.status_code == 429 or response.status_code >= 500:
                    raise ChatPlatformUnavailableError(
                        f"{method} {log_path} returned {response.status_code}",
                        status_code=response.status_code,
                    )
                if response.is_error:
                    raise ChatPlatformError(
                        f"{method} {log_path} returned {response.status_code}: {response.text[:200]}",
                        status_code=response.status_code,
                    )

        return response

    async def send_channel_message(
        self,
        message: MessagePayload,
        channel_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Post a message to a channel.

        Not retried: a timed out send may still have been delivered.

        Args:
            message: Message content, embeds and components
            channel_id: Target channel; defaults to the configured one

        Returns:
            The created message as returned by Discord
        """
        channel = channel_id or self._channel_id
        if not channel:
            raise ChatPlatformError("Discord channel is not configured")

        response = await self._request(
            "POST",
            f"/channels/{channel}/messages",
            message.model_dump(mode="json", exclude_none=True),
        )
        return response.json()

    @retry_with_backoff(max_retries=3, base_delay=1.0, max_delay=10.0)
    async def edit_original_response(self, token: str, message: MessagePayload) -> None:
        """
        Replace the original response of an interaction.

        Args:
            token: Follow-up token of the interaction
            message: New message content
        """
        if not self._application_id:
            raise ChatPlatformError("Discord application id is not configured")

        await self._request(
            "PATCH",
            f"/webhooks/{self._application_id}/{token}/messages/@original",
            message.model_dump(mode="json", exclude_none=True),
            authenticated=False,
        )

    async def try_edit_original_response(self, token: str, message: MessagePayload) -> bool:
        """
        Edit the original response, logging instead of raising on failure.

        Used at the end of detached work: whatever the work already changed
        stays changed when the edit cannot be delivered.

        Returns:
            True if the edit was accepted
        """
        try:
            await self.edit_original_response(token, message)
            return True
        except Exception as e:
            logger.error(f"Failed to edit original interaction response: {e}")
            return False

    async def register_commands(self, commands: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
        """
        Overwrite the application's global slash commands.

        Administrative call; defaults to registering the audit command.

        Returns:
            Registered commands as returned by Discord
        """
        if not self._application_id:
            raise ChatPlatformError("Discord application id is not configured")

        response = await self._request(
            "PUT",
            f"/applications/{self._application_id}/commands",
            commands if commands is not None else [AUDIT_COMMAND],
        )
        registered = response.json()
        logger.info(f"Registered {len(registered)} application commands")
        return registered
