"""HubSpot API client for forms and contacts"""
import httpx
from typing import Any, Dict, List, Optional
import logging

from app.config import Settings
from app.models.forms import (
    FetchFormResult,
    HubspotFormDefinition,
    SubmissionPayload,
    SubmissionResult,
    SubmissionResultData,
)
from app.services.errors import HubspotAPIError

logger = logging.getLogger(__name__)

# HubSpot encodes multiple checkbox values as one semicolon separated string
MULTI_VALUE_SEPARATOR = ";"


def _error_message(response: httpx.Response) -> str:
    """Pull the human readable message out of a HubSpot error body"""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            if errors[0].get("message"):
                return str(errors[0]["message"])

    return f"HubSpot request failed with status {response.status_code}"


class HubspotClient:
    """
    Thin async wrapper over the HubSpot REST API

    One instance is created per process and owns a single httpx.AsyncClient.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.hubspot_timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {settings.hubspot_access_token}",
                "Content-Type": "application/json",
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = await self._client.request(method, url, **kwargs)

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"HubSpot {method} {url} failed: {response.status_code} - {message}")
            raise HubspotAPIError(response.status_code, message)

        if not response.content:
            return {}
        return response.json()

    async def get_form_by_id(self, form_id: str) -> Dict[str, Any]:
        """
        Fetch a marketing form definition

        Args:
            form_id: HubSpot form GUID

        Returns:
            Raw form definition JSON
        """
        return await self._request(
            "GET",
            f"{self.settings.hubspot_api_base}/marketing/v3/forms/{form_id}",
            params={"archived": "false"},
        )

    async def create_contact(self, properties: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a CRM contact

        Args:
            properties: Contact property name to value

        Returns:
            Created contact JSON
        """
        return await self._request(
            "POST",
            f"{self.settings.hubspot_api_base}/crm/v3/objects/contacts",
            json={"properties": properties},
        )

    async def submit_form(self, payload: SubmissionPayload) -> SubmissionResultData:
        """
        Record a form submission through the Forms submission API

        Args:
            payload: Submission payload built from the form values

        Returns:
            SubmissionResultData with status "completed"
        """
        fields: List[Dict[str, str]] = []
        for name, value in payload.fields.items():
            if isinstance(value, list):
                value = MULTI_VALUE_SEPARATOR.join(value)
            else:
                value = str(value)
            fields.append({"name": name, "value": value})

        body: Dict[str, Any] = {"fields": fields}
        context = {}
        if payload.page_url:
            context["pageUri"] = payload.page_url
        if payload.page_name:
            context["pageName"] = payload.page_name
        if context:
            body["context"] = context

        url = (
            f"{self.settings.hubspot_submit_base}/submissions/v3/integration/submit/"
            f"{self.settings.hubspot_portal_id}/{payload.form_id}"
        )
        data = await self._request("POST", url, json=body)

        return SubmissionResultData.model_validate({
            **data,
            "redirectUrl": data.get("redirectUri") or data.get("redirectUrl"),
            "status": "completed",
            "correlationId": data.get("correlationId") or data.get("submissionId"),
        })


async def get_hubspot_form(client: HubspotClient, form_id: str) -> FetchFormResult:
    """Fetch and parse a form, folding every failure into the result"""
    try:
        logger.info(f"Fetching HubSpot form {form_id}")
        raw = await client.get_form_by_id(form_id)
        return FetchFormResult(success=True, data=HubspotFormDefinition.model_validate(raw))
    except HubspotAPIError as e:
        logger.error(f"HubSpot form fetch error: {e}")
        return FetchFormResult(success=False, error=e.message)
    except Exception as e:
        logger.error(f"HubSpot form fetch error: {e}")
        return FetchFormResult(success=False, error=str(e) or "Failed to fetch form")


async def submit_hubspot_form(client: HubspotClient, payload: SubmissionPayload) -> SubmissionResult:
    """Submit a payload, folding every failure into the result"""
    try:
        logger.info(f"Submitting HubSpot form {payload.form_id}")
        data = await client.submit_form(payload)
        return SubmissionResult(success=True, data=data)
    except HubspotAPIError as e:
        logger.error(f"HubSpot form submission error: {e}")
        return SubmissionResult(success=False, error=e.message)
    except Exception as e:
        logger.error(f"HubSpot form submission error: {e}")
        return SubmissionResult(success=False, error=str(e) or "Failed to submit form")
