"""Validation schemas derived from form configurations"""
import math
import re
from typing import Annotated, Any, Callable, Dict, List, Mapping, Optional, Tuple, Type, Union

from pydantic import (
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    create_model,
)
from pydantic_core import PydanticCustomError

from app.models.forms import FormConfig, FormFieldConfig

EMAIL_MESSAGE = "Please enter a valid email address."
NUMBER_MESSAGE = "Please enter a valid number."
MESSAGE_MESSAGE = "Please enter your message."
URL_MESSAGE = "Please enter a valid URL."
TEXT_MESSAGE = "Please enter text."
OPTIONS_MESSAGE = "Please select valid options."
UNKNOWN_MESSAGE = "Unknown field."

_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(AnyUrl)

# Decimal or exponent notation, as typed into a number input
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _fail(error_type: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(error_type, message)


def parse_number(value: str) -> Optional[Union[int, float]]:
    """Parse a numeric string, returning None when it is not a finite number"""
    text = value.strip()
    if not _NUMBER_RE.match(text):
        return None
    if re.fullmatch(r"[+-]?\d+", text):
        return int(text)
    number = float(text)
    if not math.isfinite(number):
        return None
    return number


def is_valid_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def _string_check(field: FormFieldConfig) -> Callable[[Any], Any]:
    """Build the check for every single-valued field type"""
    required = bool(field.required)

    def check(value: Any) -> Any:
        if value is None:
            if required:
                raise _fail("required", f"{field.label or field.name} is required.")
            return None
        if not isinstance(value, str):
            raise _fail("string_type", TEXT_MESSAGE)

        if value == "":
            if field.type == "multi_line_text":
                raise _fail("too_short", MESSAGE_MESSAGE)
            if required:
                raise _fail("required", f"{field.label or field.name} is required.")
            return None

        result: Any = value
        if field.type == "email":
            try:
                _email_adapter.validate_python(value)
            except ValidationError:
                raise _fail("email", EMAIL_MESSAGE) from None
        elif field.type == "number":
            number = parse_number(value)
            if number is None:
                raise _fail("number", NUMBER_MESSAGE)
            result = number

        if field.name == "website" and not is_valid_url(value):
            raise _fail("url", URL_MESSAGE)

        return result

    return check


def _multi_check(field: FormFieldConfig) -> Callable[[Any], Any]:
    # Emptiness is not enforced, even for required fields
    def check(value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise _fail("list_type", OPTIONS_MESSAGE)
        if field.name == "website":
            for item in value:
                if item and not is_valid_url(item):
                    raise _fail("url", URL_MESSAGE)
        return list(value)

    return check


def _field_definition(field: FormFieldConfig) -> Tuple[Any, Any]:
    if field.type == "multiselect":
        check = _multi_check(field)
        annotation = Annotated[Optional[List[str]], BeforeValidator(check)]
    else:
        check = _string_check(field)
        annotation = Annotated[Optional[Any], BeforeValidator(check)]

    if field.required:
        return annotation, Field(..., alias=field.name)
    return annotation, Field(None, alias=field.name)


def build_validation_schema(config: FormConfig) -> Type[BaseModel]:
    """
    Create a pydantic model validating the values of a form

    HubSpot field names are not always Python identifiers, so each field is
    stored under a positional attribute and addressed through its alias.

    Args:
        config: Form configuration

    Returns:
        Model class; instantiate with model_validate(values)
    """
    definitions: Dict[str, Any] = {}
    for index, field in enumerate(config.fields):
        definitions[f"field_{index}"] = _field_definition(field)

    return create_model(
        "FormValues",
        __config__=ConfigDict(extra="forbid"),
        **definitions,
    )


def _error_message(error: Mapping[str, Any], config: FormConfig) -> Tuple[str, str]:
    loc = error.get("loc") or ("",)
    name = str(loc[0])
    if error.get("type") == "missing":
        field = config.get_field(name)
        label = (field.label or field.name) if field else name
        return name, f"{label} is required."
    if error.get("type") == "extra_forbidden":
        return name, UNKNOWN_MESSAGE
    return name, error.get("msg", "Invalid value.")


def validate_form_values(
    schema: Type[BaseModel],
    config: FormConfig,
    values: Mapping[str, Any],
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Validate raw form values

    Args:
        schema: Model built by build_validation_schema
        config: Configuration the schema was built from
        values: Field name to string or list of strings

    Returns:
        (cleaned values without absent fields, field name to first error message)
    """
    try:
        model = schema.model_validate(dict(values))
    except ValidationError as exc:
        errors: Dict[str, str] = {}
        for error in exc.errors():
            name, message = _error_message(error, config)
            errors.setdefault(name, message)
        return {}, errors

    cleaned = {
        name: value
        for name, value in model.model_dump(by_alias=True).items()
        if value is not None
    }
    return cleaned, {}
