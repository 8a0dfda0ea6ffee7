"""Webhook result display: content resolution and HTML sanitization"""
import json
import nh3
from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Literal, Union

# Safe subset of HTML commonly used in generated content
ALLOWED_TAGS = {"b", "i", "em", "strong", "a", "p", "br", "ul", "ol", "li", "h1", "h2", "h3", "h4", "h5", "h6"}
ALLOWED_ATTRIBUTES = {"a": {"href", "target", "rel"}}


def sanitize_html(dirty: str) -> str:
    """
    Sanitize HTML to prevent XSS

    Only a safe subset of tags and attributes survives; the text content
    of removed tags is kept.
    """
    # rel is allowed explicitly, so nh3 must not also manage it
    return nh3.clean(dirty, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES, link_rel=None)


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


class ScalarResult(BaseModel):
    """A single content block"""
    kind: Literal["scalar"] = "scalar"
    text: str
    html: str


class ListResult(BaseModel):
    """Discrete content blocks, rendered in order"""
    kind: Literal["list"] = "list"
    items: List[str]
    html: List[str]


ResultContent = Annotated[Union[ScalarResult, ListResult], Field(discriminator="kind")]


def resolve_display_content(response: Dict[str, Any]) -> Union[ScalarResult, ListResult]:
    """
    Decide what to show for a webhook response

    A truthy `result` key wins; otherwise the whole body is the content.
    """
    content = response.get("result") or response
    if isinstance(content, list):
        items = [_to_text(item) for item in content]
        return ListResult(items=items, html=[sanitize_html(item) for item in items])

    text = _to_text(content)
    return ScalarResult(text=text, html=sanitize_html(text))


def clipboard_text(content: Union[ScalarResult, ListResult]) -> str:
    """Plain text copied for a result"""
    if isinstance(content, ListResult):
        return "\n".join(content.items)
    return content.text


class ResultPanel(BaseModel):
    """Response panel shown after a successful submission"""
    title: str
    content: ResultContent
    is_copied: bool = False
    is_regenerating: bool = False
