"""Validation schema generation for dynamic form fields"""
import math
import re
from typing import Annotated, Any, Callable, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, create_model
from pydantic_core import PydanticCustomError

from app.models.forms import FieldSpec, FieldType

Rule = Callable[[Any], Any]


class ValidationResult(BaseModel):
    """Outcome of one validation pass"""
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)


def _fail(message: str) -> PydanticCustomError:
    # Messages go through a context slot so braces in labels stay literal
    return PydanticCustomError("form_field", "{message}", {"message": message})


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def _fmt_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _with_custom(field: FieldSpec, rule: Rule) -> Rule:
    predicate = field.rules.custom_validation
    if predicate is None:
        return rule

    def validate(value: Any) -> Any:
        value = rule(value)
        if field.type != FieldType.CHECKBOX and _is_blank(value):
            return value
        if not predicate(value):
            raise _fail(f"{field.label} is invalid")
        return value

    return validate


def _string_rule(field: FieldSpec) -> Rule:
    """Rule for text and textarea fields"""
    rules = field.rules
    label = field.label
    pattern = re.compile(rules.pattern) if rules.pattern else None

    def validate(value: Any) -> Any:
        # Optional is the terminal modifier: a blank optional field skips every constraint
        if _is_blank(value) and not field.is_required:
            return ""
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise _fail(f"{label} must be text")

        if rules.min_length:
            if len(value) < rules.min_length:
                raise _fail(f"{label} must be at least {rules.min_length} characters")
        elif field.is_required and len(value) < 1:
            raise _fail(f"{label} is required")

        if rules.max_length is not None and len(value) > rules.max_length:
            raise _fail(f"{label} must be no more than {rules.max_length} characters")

        if pattern is not None and pattern.fullmatch(value) is None:
            raise _fail(f"{label} format is invalid")

        return value

    return validate


def _number_rule(field: FieldSpec) -> Rule:
    """Rule for number fields; raw input is coerced before any bound check"""
    rules = field.rules
    label = field.label

    def validate(value: Any) -> Any:
        if isinstance(value, bool):
            raise _fail(f"{label} must be a number")
        if isinstance(value, str):
            value = value.strip()
        if _is_blank(value):
            if field.is_required:
                raise _fail(f"{label} is required")
            return ""

        try:
            number = float(value)
        except (TypeError, ValueError):
            raise _fail(f"{label} must be a number")
        if math.isnan(number):
            if field.is_required:
                raise _fail(f"{label} is required")
            return ""
        if math.isinf(number):
            raise _fail(f"{label} must be a number")

        if rules.min is not None and number < rules.min:
            raise _fail(f"{label} must be at least {_fmt_number(rules.min)}")
        if rules.max is not None and number > rules.max:
            raise _fail(f"{label} must be no more than {_fmt_number(rules.max)}")

        return int(number) if number.is_integer() else number

    return validate


def _select_rule(field: FieldSpec) -> Rule:
    """Rule for select fields: a closed enumeration of option values"""
    allowed = [option.value for option in field.options or []]
    label = field.label

    def validate(value: Any) -> Any:
        if _is_blank(value):
            if field.is_required:
                raise _fail(f"{label} is required")
            return ""
        if not isinstance(value, str) or value not in allowed:
            raise _fail(f"{label} must be one of: {', '.join(allowed)}")
        return value

    return validate


def _checkbox_rule(field: FieldSpec) -> Rule:
    """Rule for checkbox fields; "required" does not apply to a boolean"""
    label = field.label

    def validate(value: Any) -> Any:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise _fail(f"{label} must be checked or unchecked")
        return value

    return validate


_RULE_BUILDERS: Dict[FieldType, Callable[[FieldSpec], Rule]] = {
    FieldType.TEXT: _string_rule,
    FieldType.TEXTAREA: _string_rule,
    FieldType.NUMBER: _number_rule,
    FieldType.SELECT: _select_rule,
    FieldType.CHECKBOX: _checkbox_rule,
}

_unhandled = set(FieldType) - set(_RULE_BUILDERS)
if _unhandled:
    raise RuntimeError(f"No validation rule for field types: {sorted(t.value for t in _unhandled)}")


def build_rule(field: FieldSpec) -> Rule:
    """Compile the validation rule for one field"""
    return _with_custom(field, _RULE_BUILDERS[field.type](field))


class FormSchema:
    """
    Compiled validation schema for a list of fields

    Wraps a generated pydantic model: one attribute per field, aliased to the
    field's name so arbitrary names (dashes, reserved words) are safe.
    """

    def __init__(self, fields: List[FieldSpec]):
        self.fields = list(fields)
        self._names: Dict[str, str] = {}
        definitions = {}

        for index, field in enumerate(self.fields):
            attr = f"field_{index}"
            self._names[attr] = field.name
            definitions[attr] = (
                Annotated[Any, BeforeValidator(build_rule(field))],
                Field(default=None, alias=field.name, validate_default=True),
            )

        self.model = create_model(
            "GeneratedFormSchema",
            __config__=ConfigDict(extra="ignore"),
            **definitions,
        )

    def _field_name(self, loc: tuple) -> str:
        if not loc:
            return ""
        key = str(loc[0])
        return self._names.get(key, key)

    def safe_validate(self, data: Optional[Dict[str, Any]]) -> ValidationResult:
        """
        Validate a value map without raising

        Every failing field is reported; a field carries one message, from the
        first rule it fails. Blank optional values come back as '' so the
        coerced map only holds strings, numbers and booleans.
        """
        try:
            instance = self.model.model_validate(data or {})
        except ValidationError as e:
            errors: Dict[str, str] = {}
            for error in e.errors():
                name = self._field_name(error.get("loc", ()))
                # First failing rule wins, deliberately
                errors.setdefault(name, error.get("msg", "Invalid value"))
            return ValidationResult(valid=False, errors=errors)

        return ValidationResult(valid=True, data=instance.model_dump(by_alias=True))

    def validate_field(self, name: str, data: Optional[Dict[str, Any]]) -> Optional[str]:
        """Error message for a single field, or None if it passes"""
        return self.safe_validate(data).errors.get(name)


def generate_schema(fields: List[FieldSpec]) -> FormSchema:
    """Translate a field list into a validation schema"""
    return FormSchema(fields)


def validate_form_data(data: Optional[Dict[str, Any]], schema: FormSchema) -> Dict[str, Any]:
    """
    Validate form data against a generated schema

    Returns:
        {"valid": bool, "errors": {field_name: message}}
    """
    result = schema.safe_validate(data)
    return {"valid": result.valid, "errors": result.errors}
