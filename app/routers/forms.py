"""HubSpot form endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from app.config import Settings
from app.models.forms import (
    FormSubmitRequest,
    FormSubmitResponse,
    FormView,
    SubmissionPayload,
    SubmissionResult,
    SubmissionStatus,
)
from app.services.errors import (
    FetchFailure,
    FieldTypeError,
    UnknownFieldError,
    ValidationFailure,
)
from app.services.form_controller import HubspotFormController
from app.services.hubspot_service import HubspotClient, get_hubspot_form, submit_hubspot_form

logger = logging.getLogger(__name__)
router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_hubspot_client(request: Request) -> HubspotClient:
    return request.app.state.hubspot_client


def build_controller(
    form_id: str,
    client: HubspotClient,
    submission: SubmissionStatus,
    page_url: Optional[str] = None,
    page_name: Optional[str] = None,
) -> HubspotFormController:
    """Wire a controller to the HubSpot client and the sidebar feed"""

    async def fetch_form(fid: str):
        return await get_hubspot_form(client, fid)

    async def submit_form(payload: SubmissionPayload):
        return await submit_hubspot_form(client, payload)

    def on_submission_data(payload: SubmissionPayload) -> None:
        submission.submission_data = payload

    def on_submission_response(result: SubmissionResult) -> None:
        submission.submission_response = result

    return HubspotFormController(
        form_id,
        fetch_form=fetch_form,
        submit_form=submit_form,
        on_submission_data=on_submission_data,
        on_submission_response=on_submission_response,
        page_url=page_url,
        page_name=page_name,
    )


@router.get("/default")
async def get_default_form(settings: Settings = Depends(get_settings)):
    """Form rendered when no id is given"""
    return {"form_id": settings.hubspot_form_id}


@router.get("/{form_id}", response_model=FormView)
async def get_form(form_id: str, client: HubspotClient = Depends(get_hubspot_client)):
    """
    Fetch a HubSpot form and describe how to render it (PUBLIC endpoint)
    """
    try:
        controller = build_controller(form_id, client, SubmissionStatus())
        await controller.mount()
        controller.raise_for_failure()

        return controller.view()

    except FetchFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get form error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{form_id}/submit", response_model=FormSubmitResponse)
async def submit_form(
    form_id: str,
    request: FormSubmitRequest,
    client: HubspotClient = Depends(get_hubspot_client),
):
    """
    Validate values and relay them to HubSpot (PUBLIC endpoint)

    Submit failures are reported with success=false so the caller can retry.
    """
    try:
        submission = SubmissionStatus()
        controller = build_controller(
            form_id, client, submission, page_url=request.page_url, page_name=request.page_name
        )
        await controller.mount()
        controller.raise_for_failure()

        try:
            for name, value in request.values.items():
                controller.set_value(name, value)
        except (UnknownFieldError, FieldTypeError) as e:
            raise HTTPException(status_code=422, detail=str(e))

        try:
            result = await controller.submit()
        except ValidationFailure as e:
            body = FormSubmitResponse(success=False, errors=e.errors, view=controller.view())
            return JSONResponse(
                status_code=422,
                content=body.model_dump(mode="json", by_alias=True),
            )

        if controller.submit_failure:
            logger.warning(f"Submission for form {form_id} failed: {controller.submit_failure}")

        return FormSubmitResponse(
            success=result.success,
            view=controller.view(),
            submission=submission,
        )

    except FetchFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Form submission error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
