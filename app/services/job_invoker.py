"""
Job invoker.

Re-runs a monitored function over HTTP for an explicit business day.
"""

from typing import Optional

import httpx

from app.config import Settings
from app.utils.business_day import BUSINESS_DAY_HEADER
from app.utils.logging import get_logger
from app.utils.metrics import OperationMetrics, track_api_call

logger = get_logger(__name__)


class JobInvoker:
    """Invokes monitored functions by name."""

    def __init__(
        self,
        base_url: Optional[str],
        invoke_key: Optional[str],
        timeout: float = 150.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/") if base_url else None
        self._invoke_key = invoke_key
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "JobInvoker":
        return cls(
            settings.functions_base_url,
            settings.function_invoke_key,
            timeout=settings.job_invoke_timeout_seconds,
            transport=transport,
        )

    async def invoke(
        self,
        function_name: str,
        business_day: str,
        metrics: Optional[OperationMetrics] = None,
    ) -> bool:
        """
        Run a function for a business day.

        The business day is passed explicitly so the function recomputes the
        day it originally failed on instead of defaulting to yesterday.

        Args:
            function_name: Name of the function to run
            business_day: Day to process (YYYY-MM-DD)
            metrics: Optional collector for call latency

        Returns:
            True if the function answered with a success status
        """
        if not self._base_url or not self._invoke_key:
            logger.error(
                "Function invocation is not configured; cannot retry",
                extra={"function_name": function_name, "business_day": business_day},
            )
            return False

        headers = {
            "Authorization": f"Bearer {self._invoke_key}",
            "apikey": self._invoke_key,
            "Content-Type": "application/json",
            BUSINESS_DAY_HEADER: business_day,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with track_api_call(
                    metrics, "functions", logger, "POST", f"/{function_name}"
                ) as call:
                    response = await client.post(
                        f"{self._base_url}/{function_name}",
                        json={},
                        headers=headers,
                    )
                    call["status_code"] = response.status_code
        except httpx.HTTPError as e:
            logger.warning(
                f"Retry of {function_name} failed: {e}",
                extra={"function_name": function_name, "business_day": business_day},
            )
            return False

        if response.is_success:
            return True

        logger.warning(
            f"Retry of {function_name} returned {response.status_code}",
            extra={"function_name": function_name, "business_day": business_day},
        )
        return False
