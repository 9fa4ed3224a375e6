"""Errors raised by the form services"""
from typing import Dict, Optional


class HubspotAPIError(Exception):
    """Non-2xx response from HubSpot"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class FetchFailure(Exception):
    """Loading the form definition failed; terminal for the mount"""


class SubmitFailure(Exception):
    """Relaying a submission failed; the user may resubmit"""


class ValidationFailure(Exception):
    """Local per-field validation failed; nothing was sent"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("Form values failed validation")
        self.errors = errors


class UnknownFieldError(KeyError):
    """Value written for a name the form does not define"""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown field: {self.name}"


class FieldTypeError(TypeError):
    """Scalar written to a multiselect field, or a list to a scalar one"""

    def __init__(self, name: str, detail: Optional[str] = None):
        super().__init__(detail or f"Wrong value kind for field: {name}")
        self.name = name
