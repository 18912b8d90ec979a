"""
Example monitored function.

`test-alert` exercises the alerting pipeline end to end: `?fail=1` makes it
raise so a pending error is filed, otherwise it records a successful run
for the resolved business day.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from app.dependencies import get_error_gateway
from app.services.error_capture import ErrorCaptureGateway
from app.utils.business_day import business_day_for_request

router = APIRouter(prefix="/jobs", tags=["jobs"])

TEST_ALERT_JOB = "test-alert"


@router.api_route("/test-alert", methods=["GET", "POST"])
async def test_alert(
    request: Request,
    gateway: ErrorCaptureGateway = Depends(get_error_gateway),
) -> Response:
    """Run the test-alert function under error capture."""

    async def run(req: Request) -> Response:
        business_day = business_day_for_request(req)

        if req.query_params.get("fail") == "1":
            raise RuntimeError(f"Test failure for alerting (business day: {business_day})")

        await gateway.report_success(TEST_ALERT_JOB, 1, business_day)
        return JSONResponse({"message": "Alert processed", "business_day": business_day})

    return await gateway.capture_on(TEST_ALERT_JOB, run)(request)
