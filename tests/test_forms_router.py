"""Tests for the form endpoints."""

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.models.forms import SubmissionPayload, SubmissionResultData
from app.services.errors import HubspotAPIError


class FakeHubspotClient:
    """Stands in for HubspotClient; records submissions."""

    def __init__(self, form: Optional[Dict[str, Any]] = None, submit_error: Optional[Exception] = None):
        self.form = form
        self.submit_error = submit_error
        self.submitted: List[SubmissionPayload] = []

    async def get_form_by_id(self, form_id: str) -> Dict[str, Any]:
        if self.form is None:
            raise HubspotAPIError(404, "not found")
        return self.form

    async def submit_form(self, payload: SubmissionPayload) -> SubmissionResultData:
        self.submitted.append(payload)
        if self.submit_error:
            raise self.submit_error
        return SubmissionResultData(status="completed", inlineMessage="Thanks!")


def _client(settings: Settings, fake: FakeHubspotClient) -> TestClient:
    return TestClient(create_app(settings, hubspot_client=fake))


@pytest.fixture
def valid_values() -> Dict[str, Any]:
    return {
        "firstname": "Jane",
        "email": "jane@acme.io",
        "colors": ["red"],
        "website": "https://acme.io",
    }


class TestGetForm:
    def test_default_form_id(self, settings: Settings) -> None:
        response = _client(settings, FakeHubspotClient()).get("/api/forms/default")
        assert response.status_code == 200
        assert response.json() == {"form_id": "form-guid"}

    def test_renders_view(self, settings: Settings, hubspot_form_json: Dict[str, Any]) -> None:
        response = _client(settings, FakeHubspotClient(hubspot_form_json)).get("/api/forms/form-guid")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["title"] == "Contact us"
        assert body["fields"][2]["widget"] == "checkbox_group"
        assert body["fields"][2]["value"] == []

    def test_fetch_failure(self, settings: Settings) -> None:
        response = _client(settings, FakeHubspotClient()).get("/api/forms/missing")
        assert response.status_code == 502
        assert response.json()["detail"] == "not found"


class TestSubmit:
    def test_success(
        self, settings: Settings, hubspot_form_json: Dict[str, Any], valid_values: Dict[str, Any]
    ) -> None:
        fake = FakeHubspotClient(hubspot_form_json)
        response = _client(settings, fake).post(
            "/api/forms/form-guid/submit",
            json={"values": valid_values, "page_url": "https://acme.io/contact", "page_name": "Contact"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["view"]["success_banner"] == "Form submitted successfully!"
        assert body["submission"]["submission_data"]["formId"] == "form-guid"
        assert body["submission"]["submission_data"]["fields"]["colors"] == ["red"]
        assert body["submission"]["submission_data"]["fieldTypes"]["colors"] == "multiple_checkboxes"
        assert body["submission"]["submission_response"]["success"] is True
        assert body["submission"]["submission_response"]["data"]["inlineMessage"] == "Thanks!"

        assert len(fake.submitted) == 1
        assert fake.submitted[0].page_name == "Contact"

    def test_number_is_relayed_coerced(
        self, settings: Settings, hubspot_form_json: Dict[str, Any], valid_values: Dict[str, Any]
    ) -> None:
        fake = FakeHubspotClient(hubspot_form_json)
        response = _client(settings, fake).post(
            "/api/forms/form-guid/submit",
            json={"values": {**valid_values, "employees": "42"}},
        )

        assert response.status_code == 200
        assert response.json()["submission"]["submission_data"]["fields"]["employees"] == 42
        assert fake.submitted[0].fields["employees"] == 42

    def test_validation_errors(self, settings: Settings, hubspot_form_json: Dict[str, Any]) -> None:
        fake = FakeHubspotClient(hubspot_form_json)
        response = _client(settings, fake).post(
            "/api/forms/form-guid/submit",
            json={"values": {"firstname": "Jane", "email": "jane@acme.io", "website": "not a url"}},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["errors"] == {"website": "Please enter a valid URL."}
        assert fake.submitted == []

    def test_unknown_field(self, settings: Settings, hubspot_form_json: Dict[str, Any]) -> None:
        response = _client(settings, FakeHubspotClient(hubspot_form_json)).post(
            "/api/forms/form-guid/submit",
            json={"values": {"nickname": "JJ"}},
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Unknown field: nickname"

    def test_submit_failure_is_recoverable(
        self, settings: Settings, hubspot_form_json: Dict[str, Any], valid_values: Dict[str, Any]
    ) -> None:
        fake = FakeHubspotClient(hubspot_form_json, submit_error=HubspotAPIError(400, "Form is archived"))
        response = _client(settings, fake).post("/api/forms/form-guid/submit", json={"values": valid_values})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["view"]["error_banner"] == "Form is archived"
        assert body["submission"]["submission_response"] == {
            "success": False,
            "data": None,
            "error": "Form is archived",
        }

    def test_fetch_failure(self, settings: Settings) -> None:
        response = _client(settings, FakeHubspotClient()).post(
            "/api/forms/missing/submit", json={"values": {}}
        )
        assert response.status_code == 502
        assert response.json()["detail"] == "not found"


class TestApp:
    def test_health(self, settings: Settings) -> None:
        response = _client(settings, FakeHubspotClient()).get("/health")
        assert response.json()["status"] == "healthy"

    def test_lifespan_builds_client(self, settings: Settings) -> None:
        app = create_app(settings)
        with TestClient(app):
            assert app.state.hubspot_client is not None
        assert app.state.hubspot_client is None

    def test_unhandled_errors_are_hidden_by_default(self, settings: Settings) -> None:
        app = create_app(settings, hubspot_client=FakeHubspotClient())

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret token in message")

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
        }

    def test_unhandled_errors_exposed_when_enabled(self, settings: Settings) -> None:
        app = create_app(settings.model_copy(update={"expose_errors": True}), hubspot_client=FakeHubspotClient())

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret token in message")

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json()["detail"] == "secret token in message"
