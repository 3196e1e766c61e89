"""API routes for applying to jobs."""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.core.security import CurrentUser, require_job_seeker
from app.schemas.application import ApplicationRead, ApplyResult
from app.services.application_service import (
    ApplicationLifecycleService,
    Submission,
)
from app.services.dependencies import get_application_service
from app.services.file_storage import DocumentUpload
from app.utils.responses import success_response
from app.utils.validators import parse_answers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


async def _read_upload(upload: UploadFile | None) -> DocumentUpload | None:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return DocumentUpload(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type,
    )


@router.post("/{job_id}/apply", status_code=status.HTTP_201_CREATED)
async def apply_to_job(
    job_id: int,
    cover_letter: str | None = Form(default=None),
    answers: str | None = Form(default=None),
    resume: UploadFile | None = File(default=None),
    cover_letter_file: UploadFile | None = File(default=None),
    user: CurrentUser = Depends(require_job_seeker),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    """Apply to a job, or reapply after a withdrawal."""
    submission = Submission(
        cover_letter_text=cover_letter,
        answers=parse_answers(answers),
        resume_file=await _read_upload(resume),
        cover_letter_file=await _read_upload(cover_letter_file),
    )
    result = await service.submit(job_id, user, submission)

    payload = ApplyResult(
        application=ApplicationRead.model_validate(result.application),
        attempt=result.attempt,
        warning=result.warning,
    )
    message = "Application submitted"
    if result.attempt > 1:
        message = "Application resubmitted"
    return success_response(
        status_code=status.HTTP_201_CREATED,
        message=message,
        data=payload.model_dump(mode="json"),
    )
