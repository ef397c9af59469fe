from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.adapters.dashboard.base import AbstractDashboardClient
from app.adapters.dashboard.factory import create_dashboard_client
from app.adapters.rate_limit.base import RateLimitDecision
from app.core.config import settings
from app.core.rate_limit import enforce_submission_rate_limit, rate_limit_headers
from app.schemas.cases import CaseSubmissionRequest, CaseSubmissionResponse
from app.services.case_submission_service import CaseSubmissionService, parse_case_submission

router = APIRouter(tags=["Cases"])


@router.post(
    "/public/cases/submit",
    status_code=201,
    response_model=CaseSubmissionResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": CaseSubmissionRequest.model_json_schema(by_alias=True),
                }
            },
        }
    },
    responses={
        400: {"description": "Invalid JSON or validation failure"},
        404: {"description": "Company not found"},
        429: {"description": "Rate limit exceeded; see Retry-After"},
        503: {"description": "Dashboard API URL not configured"},
    },
)
async def submit_case(
    request: Request,
    decision: RateLimitDecision | None = Depends(enforce_submission_rate_limit),
    dashboard: AbstractDashboardClient = Depends(create_dashboard_client),
) -> JSONResponse:
    """Submit a case through a company's public whistleblowing form.

    The rate limit gate runs before the body is read. Admitted submissions
    are validated and forwarded to the dashboard; the dashboard's JSON is
    relayed with the client's remaining quota in X-RateLimit-* headers.

    Raises:
        ValidationAppError: 400 for invalid JSON or fields.
        RateLimitExceededError: 429 when the client's quota is used up.
        NotFoundAppError: 404 when the company does not exist.
        UpstreamAppError: 500 when the dashboard fails.
    """
    submission = parse_case_submission(await request.body())
    payload = await CaseSubmissionService(dashboard).submit(submission)

    headers = None
    if decision is not None and settings.app.rate_limit_include_headers:
        headers = rate_limit_headers(decision)

    return JSONResponse(content=payload, status_code=201, headers=headers)
