"""Form-related Pydantic models"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Dict, List, Literal, Optional, Union


FieldType = Literal["text", "email", "select", "multiselect", "number", "multi_line_text"]

RawFieldValue = Union[str, List[str]]

# Validated values: number fields arrive as int or float
SubmittedValue = Union[str, int, float, List[str]]


# HubSpot side (read-only, owned by the Marketing Forms API)

class HubspotFieldOption(BaseModel):
    """Option of a HubSpot dropdown or checkbox field"""
    model_config = ConfigDict(extra="ignore")

    label: str
    value: str


class HubspotField(BaseModel):
    """Field definition as returned by HubSpot"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    label: str = ""
    field_type: str = Field(..., alias="fieldType")
    required: bool = False
    description: Optional[str] = None
    placeholder: Optional[str] = None
    options: Optional[List[HubspotFieldOption]] = None


class HubspotFieldGroup(BaseModel):
    """Group of fields rendered together"""
    model_config = ConfigDict(extra="ignore")

    fields: List[HubspotField] = []


class HubspotFormDefinition(BaseModel):
    """Form definition fetched by id"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    field_groups: List[HubspotFieldGroup] = Field(default_factory=list, alias="fieldGroups")


class FetchFormResult(BaseModel):
    """Outcome of fetching a form definition"""
    success: bool
    data: Optional[HubspotFormDefinition] = None
    error: Optional[str] = None


# Internal configuration

class FieldOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class FormFieldConfig(BaseModel):
    """Flattened description of one rendered field"""
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    type: FieldType = "text"
    placeholder: Optional[str] = None
    description: Optional[str] = None
    required: Optional[bool] = None
    options: Optional[List[FieldOption]] = None


class FormConfig(BaseModel):
    """One rendered form"""
    model_config = ConfigDict(frozen=True)

    name: str
    fields: List[FormFieldConfig] = []

    def get_field(self, name: str) -> Optional[FormFieldConfig]:
        for field in self.fields:
            if field.name == name:
                return field
        return None


# Form values

class ScalarValue(BaseModel):
    """Value of a single-valued field"""
    kind: Literal["scalar"] = "scalar"
    value: str = ""


class MultiValue(BaseModel):
    """Value of a multiselect field"""
    kind: Literal["multi"] = "multi"
    values: List[str] = []


FieldValue = Annotated[Union[ScalarValue, MultiValue], Field(discriminator="kind")]


def to_raw(values: Dict[str, FieldValue]) -> Dict[str, RawFieldValue]:
    """Unwrap tagged values into plain strings and lists"""
    raw: Dict[str, RawFieldValue] = {}
    for name, value in values.items():
        if isinstance(value, MultiValue):
            raw[name] = list(value.values)
        else:
            raw[name] = value.value
    return raw


# Submission

class SubmissionPayload(BaseModel):
    """Data sent to HubSpot to record one submission"""
    model_config = ConfigDict(populate_by_name=True)

    form_id: str = Field(..., alias="formId")
    fields: Dict[str, SubmittedValue] = {}
    field_types: Dict[str, str] = Field(default_factory=dict, alias="fieldTypes")
    page_url: Optional[str] = Field(None, alias="pageUrl")
    page_name: Optional[str] = Field(None, alias="pageName")


class SubmissionResultData(BaseModel):
    """Body of a successful HubSpot submission"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    inline_message: Optional[str] = Field(None, alias="inlineMessage")
    redirect_url: Optional[str] = Field(None, alias="redirectUrl")
    status: str = "completed"
    correlation_id: Optional[str] = Field(None, alias="correlationId")


class SubmissionResult(BaseModel):
    """Outcome of a submission, surfaced through callbacks"""
    success: bool
    data: Optional[SubmissionResultData] = None
    error: Optional[str] = None


# HTTP surface

class FieldView(BaseModel):
    """Render hints for one field"""
    name: str
    label: str
    widget: Literal["checkbox_group", "select", "input"]
    input_type: Optional[Literal["email", "text"]] = None
    placeholder: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    options: List[FieldOption] = []
    value: Optional[RawFieldValue] = None
    error: Optional[str] = None


class FormView(BaseModel):
    """What the form currently displays"""
    status: str
    submit_status: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    success_banner: Optional[str] = None
    error_banner: Optional[str] = None
    submit_label: str = "Submit"
    submit_enabled: bool = False
    fields: List[FieldView] = []


class SubmissionStatus(BaseModel):
    """Sidebar feed: last payload and last response"""
    submission_data: Optional[SubmissionPayload] = None
    submission_response: Optional[SubmissionResult] = None


class FormSubmitRequest(BaseModel):
    """Form submission request"""
    values: Dict[str, RawFieldValue] = {}
    page_url: Optional[str] = None
    page_name: Optional[str] = None


class FormSubmitResponse(BaseModel):
    """Form submission response"""
    success: bool
    errors: Dict[str, str] = {}
    view: FormView
    submission: SubmissionStatus = Field(default_factory=SubmissionStatus)
