"""Form-related Pydantic models"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Callable, Dict, List, Optional, Union


FieldValue = Union[str, float, bool]
FormValues = Dict[str, FieldValue]

DEFAULT_SUCCESS_MESSAGE = "Submit the form to generate results"
DEFAULT_ERROR_MESSAGE = "Failed to submit form. Please try again."


class FieldType(str, Enum):
    """Input types a dynamic form can render"""
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    SELECT = "select"
    CHECKBOX = "checkbox"


class FieldOption(BaseModel):
    """One choice of a select field"""
    label: str
    value: str


class ValidationRules(BaseModel):
    """Validation rules attached to a field"""
    model_config = ConfigDict(populate_by_name=True)

    required: bool = False
    min_length: Optional[int] = Field(None, alias="minLength")
    max_length: Optional[int] = Field(None, alias="maxLength")
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    # Predicates only exist in-process; they are never read from a Tool record
    custom_validation: Optional[Callable[[Any], bool]] = Field(
        None, alias="customValidation", exclude=True
    )


class FieldSpec(BaseModel):
    """Declarative description of one form input"""
    name: str = Field(..., min_length=1)
    label: str
    type: FieldType = FieldType.TEXT
    placeholder: Optional[str] = None
    required: bool = False
    validation: Optional[ValidationRules] = None
    options: Optional[List[FieldOption]] = None

    @model_validator(mode="after")
    def check_options(self):
        if self.type == FieldType.SELECT and not self.options:
            raise ValueError(f"Select field '{self.name}' needs at least one option")
        return self

    @property
    def rules(self) -> ValidationRules:
        return self.validation or ValidationRules()

    @property
    def is_required(self) -> bool:
        return self.required or self.rules.required


class FormMessages(BaseModel):
    """Override strings for the form status line and failure banner"""
    success: str = DEFAULT_SUCCESS_MESSAGE
    error: str = DEFAULT_ERROR_MESSAGE


class FormConfig(BaseModel):
    """Aggregate configuration for one dynamic form"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fields: List[FieldSpec] = Field(default_factory=list)
    webhook_url: str = Field("", alias="webhookUrl")
    result_title: str = Field("Result", alias="resultTitle")
    tool_id: Optional[str] = Field(None, alias="toolId")
    tool_name: Optional[str] = Field(None, alias="toolName")
    messages: FormMessages = Field(default_factory=FormMessages)

    @field_validator("fields")
    @classmethod
    def check_unique_names(cls, fields: List[FieldSpec]) -> List[FieldSpec]:
        seen = set()
        for field in fields:
            if field.name in seen:
                raise ValueError(f"Duplicate field name '{field.name}'")
            seen.add(field.name)
        return fields

    def get_field(self, name: str) -> Optional[FieldSpec]:
        return next((f for f in self.fields if f.name == name), None)


def default_values(config: FormConfig) -> FormValues:
    """Initial values: '' for every input, False for checkboxes"""
    return {
        field.name: False if field.type == FieldType.CHECKBOX else ""
        for field in config.fields
    }


class ValidateRequest(BaseModel):
    """Blur or full-form validation request"""
    values: Dict[str, Any] = Field(default_factory=dict)
    field: Optional[str] = None


class ValidateResponse(BaseModel):
    """Validation outcome"""
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class FormSubmitRequest(BaseModel):
    """Form submission request"""
    values: Dict[str, Any] = Field(default_factory=dict)


class FormSubmitResponse(BaseModel):
    """Form submission response"""
    state: str
    result: Optional[Dict[str, Any]] = None
    values: Dict[str, Any] = Field(default_factory=dict)
