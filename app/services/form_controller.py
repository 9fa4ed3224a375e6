"""Form controller: owns the state of one rendered HubSpot form"""
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Type
import logging

from pydantic import BaseModel

from app.models.forms import (
    FetchFormResult,
    FieldValue,
    FieldView,
    FormConfig,
    FormFieldConfig,
    FormView,
    MultiValue,
    RawFieldValue,
    ScalarValue,
    SubmissionPayload,
    SubmissionResult,
    SubmittedValue,
    to_raw,
)
from app.services.errors import (
    FetchFailure,
    FieldTypeError,
    SubmitFailure,
    UnknownFieldError,
    ValidationFailure,
)
from app.services.form_translator import convert_hubspot_form_to_config
from app.services.form_validation import build_validation_schema, validate_form_values
from app.services.submission_relay import SubmitForm, build_submission_payload, relay_submission

logger = logging.getLogger(__name__)

FetchForm = Callable[[str], Awaitable[FetchFormResult]]
SubmissionDataCallback = Callable[[SubmissionPayload], None]
SubmissionResponseCallback = Callable[[SubmissionResult], None]

FETCH_ERROR_MESSAGE = "Failed to fetch form"
SUBMIT_ERROR_MESSAGE = "Failed to submit form"
SUCCESS_MESSAGE = "Form submitted successfully!"


class FormStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SubmitStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    SUBMIT_ERROR = "submit_error"


def default_values(config: FormConfig) -> Dict[str, FieldValue]:
    """Empty string per field, empty list for multiselect fields"""
    values: Dict[str, FieldValue] = {}
    for field in config.fields:
        values[field.name] = MultiValue() if field.type == "multiselect" else ScalarValue()
    return values


class HubspotFormController:
    """
    State machine behind one mount of a HubSpot form

    loading -> ready | error; while ready, submits move
    idle -> submitting -> success | submit_error and any edit returns to idle.
    """

    def __init__(
        self,
        form_id: str,
        fetch_form: FetchForm,
        submit_form: SubmitForm,
        on_submission_data: Optional[SubmissionDataCallback] = None,
        on_submission_response: Optional[SubmissionResponseCallback] = None,
        page_url: Optional[str] = None,
        page_name: Optional[str] = None,
    ):
        self.form_id = form_id
        self.fetch_form = fetch_form
        self.submit_form = submit_form
        self.on_submission_data = on_submission_data
        self.on_submission_response = on_submission_response
        self.page_url = page_url
        self.page_name = page_name

        self.status = FormStatus.LOADING
        self.submit_status = SubmitStatus.IDLE
        self.config: Optional[FormConfig] = None
        self.schema: Optional[Type[BaseModel]] = None
        self.values: Dict[str, FieldValue] = {}
        self.errors: Dict[str, str] = {}
        self.cleaned_values: Dict[str, SubmittedValue] = {}
        self.fetch_failure: Optional[FetchFailure] = None
        self.submit_failure: Optional[SubmitFailure] = None
        self.is_dirty = False
        self.is_submitting = False

    @property
    def submit_success(self) -> bool:
        return self.submit_status == SubmitStatus.SUCCESS

    @property
    def error(self) -> Optional[str]:
        return str(self.fetch_failure) if self.fetch_failure else None

    @property
    def submit_error(self) -> Optional[str]:
        return str(self.submit_failure) if self.submit_failure else None

    def raise_for_failure(self) -> None:
        """Re-raise the FetchFailure that ended the mount, if any"""
        if self.fetch_failure is not None:
            raise self.fetch_failure

    async def mount(self) -> None:
        """Fetch the form definition once; failures are terminal"""
        self.status = FormStatus.LOADING
        logger.info(f"Fetching form with ID: {self.form_id}")

        try:
            result = await self.fetch_form(self.form_id)
        except Exception as e:
            logger.error(f"Error fetching form: {e}")
            self._fail_mount(str(e), cause=e)
            return

        if result.success and result.data:
            config = convert_hubspot_form_to_config(result.data)
            self.apply_config(config)
            self.status = FormStatus.READY
            self.submit_status = SubmitStatus.IDLE
        else:
            logger.error(f"Form fetch failed: {result.error}")
            self._fail_mount(result.error)

    def _fail_mount(self, message: Optional[str], cause: Optional[BaseException] = None) -> None:
        self.fetch_failure = FetchFailure(message or FETCH_ERROR_MESSAGE)
        self.fetch_failure.__cause__ = cause
        self.status = FormStatus.ERROR

    def apply_config(self, config: FormConfig) -> None:
        """
        Install a new configuration

        Errors are cleared. Unsaved input for fields the new form still
        defines survives when the form is dirty and is checked against the new
        schema on the next validate; otherwise values reset to the defaults.
        """
        self.config = config
        self.schema = build_validation_schema(config)
        self.errors = {}
        self.cleaned_values = {}

        if not self.is_dirty:
            self.values = default_values(config)
            return

        defaults = default_values(config)
        for name, value in self.values.items():
            if name in defaults and type(value) is type(defaults[name]):
                defaults[name] = value
        self.values = defaults

    def _require_field(self, name: str) -> FormFieldConfig:
        field = self.config.get_field(name) if self.config else None
        if field is None:
            raise UnknownFieldError(name)
        return field

    def _touch(self) -> None:
        self.is_dirty = True
        if self.submit_status != SubmitStatus.SUBMITTING:
            self.submit_status = SubmitStatus.IDLE

    def set_value(self, name: str, value: RawFieldValue) -> None:
        """Write a field value; lists only for multiselect fields"""
        field = self._require_field(name)
        if field.type == "multiselect":
            if isinstance(value, str):
                raise FieldTypeError(name, f"Field {name} expects a list of options")
            self.values[name] = MultiValue(values=list(value))
        else:
            if not isinstance(value, str):
                raise FieldTypeError(name, f"Field {name} expects a single value")
            self.values[name] = ScalarValue(value=value)
        self._touch()

    def toggle_option(self, name: str, option: str, checked: bool) -> None:
        """Add or remove one option of a multiselect field"""
        field = self._require_field(name)
        if field.type != "multiselect":
            raise FieldTypeError(name, f"Field {name} is not a multiselect field")

        current = self.values.get(name)
        selected = list(current.values) if isinstance(current, MultiValue) else []
        if checked:
            selected.append(option)
        else:
            selected = [value for value in selected if value != option]
        self.values[name] = MultiValue(values=selected)
        self._touch()

    def validate(self) -> Dict[str, str]:
        """Validate current values, storing the cleaned values and per-field errors"""
        if self.config is None or self.schema is None:
            return {}
        self.cleaned_values, self.errors = validate_form_values(
            self.schema, self.config, to_raw(self.values)
        )
        return self.errors

    def submission_values(self) -> Dict[str, SubmittedValue]:
        """Current values with the validator's coercions applied (numbers parsed)"""
        values: Dict[str, SubmittedValue] = dict(to_raw(self.values))
        values.update(self.cleaned_values)
        return values

    def reset(self) -> None:
        if self.config is not None:
            self.values = default_values(self.config)
        self.errors = {}
        self.cleaned_values = {}
        self.is_dirty = False

    async def submit(self) -> SubmissionResult:
        """
        Validate and relay the current values

        Raises:
            ValidationFailure: Local validation failed; nothing was sent
        """
        if self.status != FormStatus.READY or self.config is None:
            raise RuntimeError("Form is not ready")

        errors = self.validate()
        if errors:
            raise ValidationFailure(errors)

        self.is_submitting = True
        self.submit_status = SubmitStatus.SUBMITTING
        self.submit_failure = None

        payload = build_submission_payload(
            self.form_id,
            self.config,
            self.submission_values(),
            page_url=self.page_url,
            page_name=self.page_name,
        )

        if self.on_submission_data:
            self.on_submission_data(payload)

        try:
            result = await relay_submission(payload, self.submit_form)
        except Exception as e:
            logger.error(f"Form submission error: {e}")
            message = str(e) or SUBMIT_ERROR_MESSAGE
            result = SubmissionResult(success=False, error=message)
            if self.on_submission_response:
                self.on_submission_response(result)
            self.submit_failure = SubmitFailure(message)
            self.submit_failure.__cause__ = e
            self.submit_status = SubmitStatus.SUBMIT_ERROR
            return result
        finally:
            self.is_submitting = False

        if self.on_submission_response:
            self.on_submission_response(result)

        if result.success:
            self.submit_status = SubmitStatus.SUCCESS
            self.reset()
        else:
            self.submit_failure = SubmitFailure(result.error or SUBMIT_ERROR_MESSAGE)
            self.submit_status = SubmitStatus.SUBMIT_ERROR
        return result

    def _field_view(self, field: FormFieldConfig) -> FieldView:
        value = self.values.get(field.name)
        raw: Optional[RawFieldValue] = None
        if isinstance(value, MultiValue):
            raw = list(value.values)
        elif isinstance(value, ScalarValue):
            raw = value.value

        if field.type == "multiselect":
            widget, input_type, placeholder = "checkbox_group", None, field.placeholder
        elif field.type == "select":
            widget, input_type = "select", None
            placeholder = field.placeholder or "Select an option"
        else:
            widget, placeholder = "input", field.placeholder
            input_type = "email" if field.type == "email" else "text"

        return FieldView(
            name=field.name,
            label=field.label,
            widget=widget,
            input_type=input_type,
            placeholder=placeholder,
            description=field.description,
            required=bool(field.required),
            options=list(field.options or []),
            value=raw,
            error=self.errors.get(field.name),
        )

    def view(self) -> FormView:
        """Describe what the form currently displays"""
        if self.status == FormStatus.LOADING:
            return FormView(status=self.status.value, message="Loading form...")

        if self.status == FormStatus.ERROR:
            return FormView(status=self.status.value, message=f"Error: {self.error}")

        if self.config is None:
            return FormView(status=self.status.value, message="No form configuration available")

        fields: List[FieldView] = [self._field_view(field) for field in self.config.fields]
        return FormView(
            status=self.status.value,
            submit_status=self.submit_status.value,
            title=self.config.name,
            success_banner=SUCCESS_MESSAGE if self.submit_success else None,
            error_banner=self.submit_error if self.submit_status == SubmitStatus.SUBMIT_ERROR else None,
            submit_label="Submitting..." if self.is_submitting else "Submit",
            submit_enabled=not self.is_submitting,
            fields=fields,
        )
