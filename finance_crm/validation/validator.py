"""
Form Validation

DESIGN DECISION: Validation is a pure, synchronous function of
(input, schema). Schemas are pydantic models whose validators raise
PydanticCustomError with the exact message shown next to the field.

Validation ALWAYS runs before any network call. If it fails, the caller
shows the field messages and stops; nothing reaches the API.

Result shape:
- valid input   -> ValidationResult(valid=True, data={normalized fields})
- invalid input -> ValidationResult(valid=False, field_errors={field: message})
  with exactly one message per invalid field and none for valid ones.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)
from pydantic_core import PydanticCustomError

from finance_crm.models.movement import MovementKind


FIELD_ERROR_TYPE = "form_field"

# Fallback message per field, used for errors our validators do not raise
# themselves (missing keys, email syntax).
FIELD_MESSAGES = {
    "descricao": "Descreva com pelo menos 3 caracteres.",
    "valor": "Valor deve ser maior que zero.",
    "categoria": "Informe uma categoria.",
    "data": "Data obrigatoria.",
    "tipo": "Selecione receita ou despesa.",
    "email": "Informe um email valido.",
    "password": "A senha deve ter pelo menos 6 caracteres.",
}

CENT = Decimal("0.01")


def _field_error(field: str, message: Optional[str] = None) -> PydanticCustomError:
    return PydanticCustomError(FIELD_ERROR_TYPE, message or FIELD_MESSAGES[field])


def _min_length_text(value: Any, field: str, min_length: int) -> str:
    if not isinstance(value, str):
        raise _field_error(field)
    text = value.strip()
    if len(text) < min_length:
        raise _field_error(field)
    return text


def parse_amount(value: Any) -> Decimal:
    """
    Coerce user input into a positive amount, quantized to two decimals
    unless that would round it to zero.

    Accepts numbers and strings, including pt-BR notation ("1.234,56")
    and a leading "R$". Empty input counts as zero.
    """
    if isinstance(value, bool):
        raise _field_error("valor", "Informe um valor numerico.")
    if value is None:
        raise _field_error("valor")

    if isinstance(value, (int, float, Decimal)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.replace("R$", "").strip()
        if not text:
            raise _field_error("valor")
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise _field_error("valor", "Informe um valor numerico.")
    else:
        raise _field_error("valor", "Informe um valor numerico.")

    if not amount.is_finite():
        raise _field_error("valor", "Informe um valor numerico.")

    if amount <= 0:
        raise _field_error("valor")
    # Sub-cent amounts are kept as typed rather than rounded to zero
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return rounded if rounded > 0 else amount


# =============================================================================
# SCHEMAS
# =============================================================================

class MovementForm(BaseModel):
    """Input for creating a movement."""
    model_config = ConfigDict(extra="ignore")

    descricao: str
    valor: Decimal
    categoria: str
    data: str
    tipo: MovementKind

    @field_validator('descricao', mode='before')
    @classmethod
    def check_descricao(cls, v: Any) -> str:
        return _min_length_text(v, "descricao", 3)

    @field_validator('valor', mode='before')
    @classmethod
    def check_valor(cls, v: Any) -> Decimal:
        return parse_amount(v)

    @field_validator('categoria', mode='before')
    @classmethod
    def check_categoria(cls, v: Any) -> str:
        return _min_length_text(v, "categoria", 2)

    @field_validator('data', mode='before')
    @classmethod
    def check_data(cls, v: Any) -> str:
        """Date pickers hand us date objects; text inputs hand us strings."""
        if isinstance(v, datetime):
            return v.date().isoformat()
        if isinstance(v, date):
            return v.isoformat()
        return _min_length_text(v, "data", 1)

    @field_validator('tipo', mode='before')
    @classmethod
    def check_tipo(cls, v: Any) -> MovementKind:
        if isinstance(v, MovementKind):
            return v
        if isinstance(v, str):
            try:
                return MovementKind(v.strip().lower())
            except ValueError:
                pass
        raise _field_error("tipo")

    def to_payload(self) -> dict[str, Any]:
        """Create payload: the kind is implied by the endpoint, so it is left out."""
        return {
            "descricao": self.descricao,
            "valor": self.valor,
            "categoria": self.categoria,
            "data": self.data,
        }


class LoginForm(BaseModel):
    """Input for the login screen."""
    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    password: str = Field(...)

    @field_validator('email', mode='before')
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('password', mode='before')
    @classmethod
    def check_password(cls, v: Any) -> str:
        if not isinstance(v, str) or len(v) < 6:
            raise _field_error("password")
        return v


# =============================================================================
# RESULTS AND ERRORS
# =============================================================================

class FieldError(BaseModel):
    """A single invalid field and the message shown for it."""

    field: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of validate()."""

    valid: bool
    data: Optional[dict[str, Any]] = None
    field_errors: dict[str, str] = Field(default_factory=dict)

    @property
    def errors(self) -> list[FieldError]:
        return [FieldError(field=f, message=m) for f, m in self.field_errors.items()]


class FormValidationError(Exception):
    """Raised when a form must not proceed to the network."""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            "Invalid fields: " + ", ".join(sorted(self.field_errors)) if self.field_errors
            else "Invalid form"
        )

    @property
    def errors(self) -> list[FieldError]:
        return [FieldError(field=f, message=m) for f, m in self.field_errors.items()]


def _collect_field_errors(error: ValidationError) -> dict[str, str]:
    """First message per field, in schema order."""
    field_errors: dict[str, str] = {}
    for err in error.errors():
        loc = err.get("loc") or ("__root__",)
        field = str(loc[0])
        if field in field_errors:
            continue
        if err.get("type") == FIELD_ERROR_TYPE:
            field_errors[field] = err["msg"]
        else:
            field_errors[field] = FIELD_MESSAGES.get(field, err["msg"])
    return field_errors


def validate(data: Mapping[str, Any], schema: type[BaseModel]) -> ValidationResult:
    """
    Validate raw form input against a schema.

    Args:
        data: Raw input (strings from text fields, numbers, dates...)
        schema: MovementForm, LoginForm or another pydantic model

    Returns:
        ValidationResult with the normalized data or the field errors
    """
    try:
        parsed = schema.model_validate(dict(data))
    except ValidationError as e:
        return ValidationResult(valid=False, field_errors=_collect_field_errors(e))
    return ValidationResult(valid=True, data=parsed.model_dump())


def parse_form(data: Mapping[str, Any], schema: type[BaseModel]) -> BaseModel:
    """
    Validate and return the schema instance.

    Raises:
        FormValidationError: If any field is invalid
    """
    try:
        return schema.model_validate(dict(data))
    except ValidationError as e:
        raise FormValidationError(_collect_field_errors(e)) from e


def summarize_errors(result: ValidationResult) -> str:
    """
    User-facing summary of a failed validation.

    This is the banner shown above the highlighted fields.
    """
    if result.valid:
        return ""
    lines = ["Revise os campos destacados."]
    for message in result.field_errors.values():
        lines.append(f"   • {message}")
    return "\n".join(lines)
