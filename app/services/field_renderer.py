"""Per-field rendering and change handling for dynamic forms"""
import re
from pydantic import BaseModel, Field
from typing import Any, Callable, Dict, List, Optional

from app.models.forms import FieldOption, FieldSpec, FieldType, FieldValue, FormConfig

CHECKED_VALUES = {"on", "true", "1", "yes", "checked"}
DEFAULT_SELECT_PLACEHOLDER = "Select an option"
TEXTAREA_ROWS = 4

# Leading numeric prefix, the way a browser's parseFloat reads it
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class RenderedField(BaseModel):
    """Render descriptor for one input"""
    name: str
    label: str
    type: FieldType
    widget: str
    input_type: Optional[str] = None
    value: Any = None
    placeholder: Optional[str] = None
    required: bool = False
    rows: Optional[int] = None
    options: List[FieldOption] = Field(default_factory=list)
    error: Optional[str] = None
    aria_invalid: bool = False
    aria_describedby: Optional[str] = None


def _parse_text(raw: Any) -> FieldValue:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def _parse_number(raw: Any) -> FieldValue:
    if isinstance(raw, bool) or raw is None:
        return ""
    if isinstance(raw, (int, float)):
        return float(raw)
    match = _FLOAT_PREFIX.match(str(raw))
    if not match:
        return ""
    return float(match.group(1))


def _parse_checkbox(raw: Any) -> FieldValue:
    if isinstance(raw, str):
        return raw.strip().lower() in CHECKED_VALUES
    return bool(raw)


_PARSERS: Dict[FieldType, Callable[[Any], FieldValue]] = {
    FieldType.TEXT: _parse_text,
    FieldType.TEXTAREA: _parse_text,
    FieldType.NUMBER: _parse_number,
    FieldType.SELECT: _parse_text,
    FieldType.CHECKBOX: _parse_checkbox,
}


def parse_field_value(field: FieldSpec, raw: Any) -> FieldValue:
    """
    Map a raw change value to the field's semantic type

    checkbox -> checked boolean, number -> parsed float ('' when nothing
    parses), everything else -> the raw string.
    """
    return _PARSERS[field.type](raw)


def _base(field: FieldSpec, value: Any, error: Optional[str], widget: str) -> RenderedField:
    return RenderedField(
        name=field.name,
        label=field.label,
        type=field.type,
        widget=widget,
        value=value,
        placeholder=field.placeholder,
        required=field.is_required,
        error=error,
        aria_invalid=bool(error),
        aria_describedby=f"{field.name}-error" if error else None,
    )


def _render_text(field: FieldSpec, value: Any, error: Optional[str]) -> RenderedField:
    rendered = _base(field, "" if value is None else value, error, "input")
    rendered.input_type = "text"
    return rendered


def _render_textarea(field: FieldSpec, value: Any, error: Optional[str]) -> RenderedField:
    rendered = _base(field, "" if value is None else value, error, "textarea")
    rendered.rows = TEXTAREA_ROWS
    return rendered


def _render_number(field: FieldSpec, value: Any, error: Optional[str]) -> RenderedField:
    rendered = _base(field, "" if value is None else value, error, "input")
    rendered.input_type = "number"
    return rendered


def _render_select(field: FieldSpec, value: Any, error: Optional[str]) -> RenderedField:
    rendered = _base(field, "" if value is None else value, error, "select")
    rendered.options = [
        FieldOption(label=field.placeholder or DEFAULT_SELECT_PLACEHOLDER, value="")
    ] + list(field.options or [])
    return rendered


def _render_checkbox(field: FieldSpec, value: Any, error: Optional[str]) -> RenderedField:
    rendered = _base(field, bool(value), error, "checkbox")
    rendered.input_type = "checkbox"
    # A checkbox is never marked required and carries no placeholder
    rendered.required = False
    rendered.placeholder = None
    return rendered


_RENDERERS: Dict[FieldType, Callable[[FieldSpec, Any, Optional[str]], RenderedField]] = {
    FieldType.TEXT: _render_text,
    FieldType.TEXTAREA: _render_textarea,
    FieldType.NUMBER: _render_number,
    FieldType.SELECT: _render_select,
    FieldType.CHECKBOX: _render_checkbox,
}

for _table in (_PARSERS, _RENDERERS):
    _missing = set(FieldType) - set(_table)
    if _missing:
        raise RuntimeError(f"Field types without a handler: {sorted(t.value for t in _missing)}")


def render_field(field: FieldSpec, value: Any, error: Optional[str] = None) -> RenderedField:
    """Render one field with its current value and error"""
    return _RENDERERS[field.type](field, value, error)


def render_form(
    config: FormConfig,
    values: Dict[str, Any],
    errors: Optional[Dict[str, str]] = None
) -> List[RenderedField]:
    """Render every field of a form in configuration order"""
    errors = errors or {}
    return [
        render_field(field, values.get(field.name), errors.get(field.name))
        for field in config.fields
    ]
