"""Tool-related Pydantic models"""
from pydantic import BaseModel, Field, ValidationError
from typing import Any, Dict, List, Literal, Optional

from app.models.forms import FieldOption, FieldSpec, FieldType, FormConfig, ValidationRules


class ToolConfigError(Exception):
    """A stored Tool record describes a form that cannot be built"""


class ToolField(BaseModel):
    """Field definition as stored on a Tool record"""
    name: str
    label: str
    type: FieldType = FieldType.TEXT
    placeholder: Optional[str] = None
    required: bool = False
    options: Optional[List[FieldOption]] = None


class Tool(BaseModel):
    """Tool record from the tools table"""
    id: str
    name: str
    description: str = ""
    category: Optional[Literal["content", "social", "analytics", "automation", "business"]] = None
    icon: Optional[str] = None
    status: Literal["active", "coming_soon", "beta"] = "active"
    url: Optional[str] = None
    webhook_url: str = ""
    features: List[str] = Field(default_factory=list)
    fields: List[ToolField] = Field(default_factory=list)
    sort_order: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def slug(self) -> Optional[str]:
        if not self.url:
            return None
        return self.url.rstrip("/").rsplit("/", 1)[-1]


class ToolDetail(BaseModel):
    """Tool plus the form descriptor a client needs to render it"""
    tool: Tool
    form: Dict[str, Any]


def _reason(error: ValidationError) -> str:
    first = error.errors()[0]
    return str(first.get("ctx", {}).get("error") or first.get("msg"))


def tool_fields_to_form_fields(tool_fields: Optional[List[ToolField]] = None) -> List[FieldSpec]:
    """
    Transform stored Tool fields into FieldSpecs

    Tool records only carry a required flag, so validation is synthesized
    as {required: field.required} and nothing richer.

    Raises:
        ToolConfigError: A field cannot be built, e.g. a select with no options
    """
    specs = []
    for field in tool_fields or []:
        try:
            specs.append(FieldSpec(
                name=field.name,
                label=field.label,
                type=field.type,
                placeholder=field.placeholder,
                required=field.required,
                options=field.options,
                validation=ValidationRules(required=field.required),
            ))
        except ValidationError as e:
            raise ToolConfigError(f"Field '{field.name}' is misconfigured: {_reason(e)}") from e
    return specs


def build_form_config(tool: Tool) -> FormConfig:
    """Build the FormConfig for one page view of a tool"""
    try:
        return FormConfig(
            fields=tool_fields_to_form_fields(tool.fields),
            webhook_url=tool.webhook_url,
            result_title=f"Your AI-Generated {tool.name} is Ready",
            tool_id=tool.id,
            tool_name=tool.name,
        )
    except ToolConfigError as e:
        raise ToolConfigError(f"Tool '{tool.name}' has an invalid form. {e}") from e
    except ValidationError as e:
        raise ToolConfigError(f"Tool '{tool.name}' has an invalid form. {_reason(e)}") from e
