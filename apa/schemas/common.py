"""Shared field types and payload parsing for record schemas."""

from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ValidationError

from apa.domain.exceptions import ValidationException
from apa.shared.utils.masks import PHONE_DIGITS, unmask_phone

ModelT = TypeVar("ModelT", bound=BaseModel)


def _normalize_phone(value: str) -> str:
    """Keep digits only; exactly 11 (area code + 9-digit number)."""
    digits = unmask_phone(value)
    if len(digits) != PHONE_DIGITS:
        raise ValueError(f"phone must have exactly {PHONE_DIGITS} digits")
    return digits


def _https_url(value: str) -> str:
    if value and not value.startswith(("https://", "http://")):
        raise ValueError("must be an http(s) URL")
    return value


Phone = Annotated[str, AfterValidator(_normalize_phone)]
ImageUrl = Annotated[str, AfterValidator(_https_url)]


def parse_payload(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a raw payload; pydantic errors become a ValidationException.

    The first failing field is reported as details.field, all failures as
    details.errors ({field, message}).
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        first = errors[0]["field"] if errors else None
        raise ValidationException(
            f"Invalid {model.__name__}: {errors[0]['field']} {errors[0]['message']}" if errors else f"Invalid {model.__name__}",
            field=first,
            errors=errors,
        ) from None
