import logging

from fastapi import APIRouter, Depends

from resume_forge.app.api.dependencies import get_tailoring_coordinator
from resume_forge.app.core.auth import get_current_user_id
from resume_forge.app.schemas.tailor import TailorRequest, TailorResponse
from resume_forge.app.services.tailoring import GenerationRequest, TailoringCoordinator

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tailor"])


@router.post("/tailor", response_model=TailorResponse)
async def tailor_resume_section(
    body: TailorRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: TailoringCoordinator = Depends(get_tailoring_coordinator),
) -> TailorResponse:
    """Spend one credit to tailor a resume section to a job description.

    Args:
        body (TailorRequest): The job description, resume section and optional hints.
        user_id (str): The authenticated user.
        coordinator (TailoringCoordinator): The injected coordinator.

    Returns:
        TailorResponse: The tailored text and keyword analysis.

    Notes:
        1. Errors raised by the coordinator are rendered by the application error
           handler: 400 for blank input, 402 for missing credits, 502 for a failed
           (refunded) generation and 503 when the ledger is unavailable.

    """
    _msg = f"tailor_resume_section starting for user {user_id}"
    log.debug(_msg)

    result = await coordinator.generate(
        user_id,
        GenerationRequest(
            job_description=body.job_description,
            resume_section=body.resume_section,
            section_type=body.section_type,
            industry=body.industry,
        ),
    )

    response = TailorResponse(
        tailored_text=result.tailored_resume,
        keyword_matches=result.keyword_matches,
        improvement_tips=result.improvement_tips,
        changes=result.changes,
        degraded=result.degraded,
    )
    _msg = f"tailor_resume_section returning for user {user_id}"
    log.debug(_msg)
    return response
