import pytest
from pydantic import ValidationError

from app.models.forms import FieldSpec, FieldType, FormConfig, default_values
from app.models.tools import Tool, ToolConfigError, build_form_config, tool_fields_to_form_fields


def test_select_requires_options():
    with pytest.raises(ValidationError):
        FieldSpec(name="tone", label="Tone", type="select")


def test_duplicate_field_names_rejected():
    with pytest.raises(ValidationError):
        FormConfig(
            fields=[FieldSpec(name="a", label="A"), FieldSpec(name="a", label="Again")],
            webhook_url="https://hook.test",
        )


def test_config_is_immutable():
    config = FormConfig(fields=[], webhook_url="https://hook.test")
    with pytest.raises(ValidationError):
        config.webhook_url = "https://elsewhere.test"


def test_config_accepts_camel_case_keys():
    config = FormConfig.model_validate({
        "fields": [{"name": "age", "label": "Age", "type": "number", "validation": {"min": 18, "maxLength": 3}}],
        "webhookUrl": "https://hook.test",
        "resultTitle": "Done",
        "toolId": "t1",
    })
    assert config.webhook_url == "https://hook.test"
    assert config.fields[0].rules.max_length == 3
    assert config.result_title == "Done"
    assert config.messages.error == "Failed to submit form. Please try again."


def test_default_values():
    config = FormConfig(
        fields=[
            FieldSpec(name="idea", label="Idea"),
            FieldSpec(name="agree", label="Agree", type="checkbox"),
            FieldSpec(name="n", label="N", type="number"),
        ],
        webhook_url="https://hook.test",
    )
    assert default_values(config) == {"idea": "", "agree": False, "n": ""}


def test_tool_fields_only_carry_required_rule():
    tool = Tool(
        id="t1",
        name="Blog Writer",
        url="/tools/blog-writer",
        webhook_url="https://hook.test/blog",
        fields=[{"name": "topic", "label": "Topic", "type": "text", "required": True, "placeholder": "AI"}],
    )

    fields = tool_fields_to_form_fields(tool.fields)
    assert fields[0].type == FieldType.TEXT
    assert fields[0].validation.required is True
    assert fields[0].validation.min_length is None
    assert fields[0].placeholder == "AI"

    config = build_form_config(tool)
    assert config.webhook_url == "https://hook.test/blog"
    assert config.result_title == "Your AI-Generated Blog Writer is Ready"
    assert (config.tool_id, config.tool_name) == ("t1", "Blog Writer")
    assert tool.slug == "blog-writer"


def test_select_without_options_names_the_field():
    tool = Tool(id="t1", name="Broken", fields=[{"name": "s", "label": "S", "type": "select"}])

    with pytest.raises(ToolConfigError) as excinfo:
        build_form_config(tool)

    assert str(excinfo.value) == (
        "Tool 'Broken' has an invalid form. "
        "Field 's' is misconfigured: Select field 's' needs at least one option"
    )


def test_duplicate_tool_fields_are_a_config_error():
    tool = Tool(id="t1", name="Twice", fields=[
        {"name": "a", "label": "A"},
        {"name": "a", "label": "Again"},
    ])

    with pytest.raises(ToolConfigError, match="Duplicate field name 'a'"):
        build_form_config(tool)
