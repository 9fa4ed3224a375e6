"""Conversion of HubSpot form definitions into form configurations"""
from typing import List, Optional

from app.models.forms import (
    FieldOption,
    FieldType,
    FormConfig,
    FormFieldConfig,
    HubspotField,
    HubspotFieldOption,
    HubspotFormDefinition,
)


def _copy_options(options: Optional[List[HubspotFieldOption]]) -> Optional[List[FieldOption]]:
    if options is None:
        return None
    return [FieldOption(label=opt.label, value=opt.value) for opt in options]


def map_field_type(field: HubspotField) -> FieldType:
    """Map a HubSpot fieldType onto an internal field type"""
    if field.field_type == "email":
        return "email"
    if field.field_type == "dropdown":
        return "select"
    if field.field_type == "multiple_checkboxes":
        return "multiselect"
    if field.field_type == "number":
        return "number"
    if field.field_type == "multi_line_text":
        # Rendered as a plain text input; "multi_line_text" stays unused here
        return "text"

    # Fallback: unknown or generic types whose name mentions email are
    # treated as email fields
    if "email" in field.name.lower():
        return "email"
    return "text"


def convert_field(field: HubspotField) -> FormFieldConfig:
    field_type = map_field_type(field)
    options = None
    if field_type in ("select", "multiselect"):
        options = _copy_options(field.options)

    return FormFieldConfig(
        name=field.name,
        label=field.label,
        type=field_type,
        required=field.required,
        description=field.description,
        placeholder=field.placeholder,
        options=options,
    )


def convert_hubspot_form_to_config(hubspot_form: HubspotFormDefinition) -> FormConfig:
    """
    Flatten a HubSpot form into a form configuration

    Groups are walked in order, then the fields of each group.

    Args:
        hubspot_form: Form definition fetched from HubSpot

    Returns:
        FormConfig with one entry per HubSpot field
    """
    fields = [
        convert_field(field)
        for group in hubspot_form.field_groups
        for field in group.fields
    ]
    return FormConfig(name=hubspot_form.name, fields=fields)
