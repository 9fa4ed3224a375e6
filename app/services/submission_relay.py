"""Conversion of form values into HubSpot submissions"""
from typing import Awaitable, Callable, Dict, Mapping, Optional
import logging

from app.models.forms import FormConfig, SubmissionPayload, SubmissionResult, SubmittedValue

logger = logging.getLogger(__name__)

SubmitForm = Callable[[SubmissionPayload], Awaitable[SubmissionResult]]


def build_submission_payload(
    form_id: str,
    config: FormConfig,
    values: Mapping[str, Optional[SubmittedValue]],
    page_url: Optional[str] = None,
    page_name: Optional[str] = None,
) -> SubmissionPayload:
    """
    Build the payload for one submit attempt

    Args:
        form_id: HubSpot form GUID
        config: Configuration of the rendered form
        values: Current form values; absent fields are skipped
        page_url: URL of the page hosting the form
        page_name: Title of the page hosting the form

    Returns:
        SubmissionPayload
    """
    fields: Dict[str, SubmittedValue] = {}
    field_types: Dict[str, str] = {}

    for field in config.fields:
        value = values.get(field.name)
        if value is None:
            continue

        if field.type == "multiselect":
            fields[field.name] = list(value) if isinstance(value, list) else [value]
            field_types[field.name] = "multiple_checkboxes"
        else:
            fields[field.name] = value
            field_types[field.name] = field.type

    return SubmissionPayload(
        form_id=form_id,
        fields=fields,
        field_types=field_types,
        page_url=page_url,
        page_name=page_name,
    )


async def relay_submission(payload: SubmissionPayload, submit_form: SubmitForm) -> SubmissionResult:
    """Send the payload once; errors propagate to the caller"""
    logger.info(f"Relaying submission for form {payload.form_id} ({len(payload.fields)} fields)")
    return await submit_form(payload)
