"""Pytest configuration and shared fixtures."""

from typing import Any, Dict

import pytest

from app.config import Settings
from app.models.forms import FormConfig, HubspotFormDefinition
from app.services.form_translator import convert_hubspot_form_to_config


@pytest.fixture
def settings() -> Settings:
    """Settings with fake HubSpot credentials and no .env lookup."""
    return Settings(
        _env_file=None,
        hubspot_access_token="pat-test-token",
        hubspot_portal_id="123456",
        hubspot_form_id="form-guid",
        hubspot_api_base="https://api.hubapi.test",
        hubspot_submit_base="https://api.hsforms.test",
    )


@pytest.fixture
def hubspot_form_json() -> Dict[str, Any]:
    """Form definition shaped like the Marketing Forms v3 response."""
    return {
        "id": "form-guid",
        "name": "Contact us",
        "formType": "hubspot",
        "fieldGroups": [
            {
                "groupType": "default_group",
                "fields": [
                    {
                        "name": "firstname",
                        "label": "First name",
                        "fieldType": "single_line_text",
                        "required": True,
                        "placeholder": "Jane",
                    },
                    {
                        "name": "email",
                        "label": "Email",
                        "fieldType": "email",
                        "required": True,
                    },
                ],
            },
            {
                "groupType": "default_group",
                "fields": [
                    {
                        "name": "colors",
                        "label": "Favourite colors",
                        "fieldType": "multiple_checkboxes",
                        "required": False,
                        "options": [
                            {"label": "Red", "value": "red", "displayOrder": 0},
                            {"label": "Blue", "value": "blue", "displayOrder": 1},
                        ],
                    },
                    {
                        "name": "industry",
                        "label": "Industry",
                        "fieldType": "dropdown",
                        "required": False,
                        "options": [
                            {"label": "Software", "value": "software"},
                            {"label": "Retail", "value": "retail"},
                        ],
                    },
                    {
                        "name": "employees",
                        "label": "Employees",
                        "fieldType": "number",
                        "required": False,
                    },
                    {
                        "name": "website",
                        "label": "Website",
                        "fieldType": "single_line_text",
                        "required": False,
                    },
                    {
                        "name": "message",
                        "label": "Message",
                        "fieldType": "multi_line_text",
                        "required": False,
                        "description": "How can we help?",
                    },
                ],
            },
        ],
    }


@pytest.fixture
def hubspot_form(hubspot_form_json: Dict[str, Any]) -> HubspotFormDefinition:
    return HubspotFormDefinition.model_validate(hubspot_form_json)


@pytest.fixture
def form_config(hubspot_form: HubspotFormDefinition) -> FormConfig:
    return convert_hubspot_form_to_config(hubspot_form)
