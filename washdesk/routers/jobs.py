"""
Job API.

POST /api/create-job    : validate, create Notion record + calendar event, email
POST /api/description   : compose the job description from service checkboxes
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..config import settings
from ..errors import JobValidationError
from ..formatting import compose_description
from ..job_submission import (
    CalendarFailed,
    ConfigurationFailed,
    JobSubmitter,
    RecordServiceFailed,
    Submitted,
    ValidationFailed,
)
from ..schemas import DescriptionIn

router = APIRouter(tags=["jobs"])


def get_job_submitter(background_tasks: BackgroundTasks) -> JobSubmitter:
    """Email goes out after the response is sent."""
    return JobSubmitter(settings, dispatch=background_tasks.add_task)


@router.post("/create-job")
def create_job(payload: Any = Body(None), submitter: JobSubmitter = Depends(get_job_submitter)):
    result = submitter.submit(payload)

    if isinstance(result, Submitted):
        return JSONResponse(status_code=201, content={
            "message": "Job created successfully in Notion and Google Calendar!",
            "recordId": result.record_id,
            "eventUrl": result.event_url,
        })
    if isinstance(result, CalendarFailed):
        return JSONResponse(status_code=201, content={
            "message": "Job created in Notion, but Google Calendar integration failed.",
            "recordId": result.record_id,
            "error": result.error,
        })
    if isinstance(result, ValidationFailed):
        return JSONResponse(status_code=400, content={
            "errorMessage": result.message,
            "errors": result.errors,
        })
    if isinstance(result, ConfigurationFailed):
        return JSONResponse(status_code=500, content={
            "errorMessage": result.message,
            "missing": result.missing,
        })
    if isinstance(result, RecordServiceFailed):
        return JSONResponse(status_code=500, content={
            "errorMessage": result.message,
            "code": result.code,
        })
    raise HTTPException(status_code=500, detail="Unhandled submission outcome")


@router.post("/description")
def build_description(request: DescriptionIn):
    try:
        return {"description": compose_description(request.options, request.notes)}
    except JobValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
