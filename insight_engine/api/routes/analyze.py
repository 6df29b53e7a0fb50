from fastapi import APIRouter, Body, Request, Response

from insight_engine.core.client_identity import SESSION_HEADER, resolve_client_identity
from insight_engine.core.config import settings_for
from insight_engine.schemas.analysis import AnalyzeRequestBody
from insight_engine.services.analysis_service import AnalysisService

router = APIRouter(tags=["Analysis"])

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Max-Age": "600",
}


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


@router.options("/analyze", include_in_schema=False)
async def analyze_preflight(request: Request) -> Response:
    """Answer CORS preflight requests before any validation happens."""
    request_id_header = settings_for(request.app).log.request_id_header
    headers = {
        **PREFLIGHT_HEADERS,
        "Access-Control-Allow-Headers": f"Content-Type, {SESSION_HEADER}, {request_id_header}",
    }
    return Response(status_code=200, headers=headers)


@router.post("/analyze")
async def analyze_text(
    request: Request,
    body: AnalyzeRequestBody | None = Body(
        None,
        examples=[{"text": "I had the best day of my life.", "analysisType": "sentiment"}],
    ),
) -> dict:
    """Analyze text with AWS, Azure and Google side by side.

    Returns ``{<analysisType>: {aws, azure, google}, message, cached}``. A
    provider that failed carries ``{"error": ...}`` in its slot while the
    request as a whole still succeeds.

    Errors:
        400: missing/too short/too long text, unsupported analysis type,
            malformed body.
        429: cooldown, hourly, daily or session limit reached (``retryAfter``).
        500: unexpected failure.
    """
    service = get_analysis_service(request)
    identity = resolve_client_identity(request)
    result = await service.analyze(body or AnalyzeRequestBody(), identity)
    return result.to_response()
