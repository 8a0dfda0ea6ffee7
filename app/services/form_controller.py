"""Dynamic form controller: validation, webhook submission and result state"""
import asyncio
import logging
from enum import Enum
from pydantic import BaseModel
from typing import Any, Callable, Dict, List, Optional, Set

from app.models.forms import FormConfig, FormValues, default_values
from app.models.submissions import SubmissionCreate
from app.services.field_renderer import RenderedField, parse_field_value, render_form
from app.services.result_display import ResultPanel, clipboard_text, resolve_display_content
from app.services.schema_service import ValidationResult, generate_schema
from app.services.webhook_service import WebhookClient, WebhookError

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class FormBusyError(Exception):
    """A submission is already in flight for this form"""


class FormView(BaseModel):
    """Everything a client needs to draw the form"""
    state: FormState
    fields: List[RenderedField]
    result: Optional[ResultPanel] = None
    error: Optional[str] = None
    status_message: Optional[str] = None
    submit_disabled: bool = False


class DynamicFormController:
    """
    One form instance: owns its values, errors and visible state

    idle -> validating -> submitting -> success | error -> idle

    At most one submission is in flight per instance. History writes after
    a success run as background tasks and never affect the visible state.
    """

    def __init__(
        self,
        config: FormConfig,
        webhook_client: WebhookClient,
        submission_store=None,
        user: Optional[Dict] = None,
        clipboard: Optional[Callable[[str], Any]] = None,
        copy_feedback_seconds: float = 2.0,
        on_success: Optional[Callable[[Dict[str, Any]], Any]] = None,
        on_error: Optional[Callable[[Exception], Any]] = None,
    ):
        self.config = config
        self.schema = generate_schema(config.fields)
        self.webhook_client = webhook_client
        self.submission_store = submission_store
        self.user = user
        self.clipboard = clipboard
        self.copy_feedback_seconds = copy_feedback_seconds
        self.on_success = on_success
        self.on_error = on_error

        self.values: FormValues = default_values(config)
        self.errors: Dict[str, str] = {}
        self.state = FormState.IDLE
        self.transitions: List[FormState] = [FormState.IDLE]
        self.response: Optional[Dict[str, Any]] = None
        self.error: Optional[Exception] = None
        self.error_message: Optional[str] = None
        self.last_submitted: Optional[Dict[str, Any]] = None
        self.is_copied = False

        self._touched: Set[str] = set()
        self._copy_reset: Optional[asyncio.TimerHandle] = None
        self._background: Set[asyncio.Task] = set()

    def _set_state(self, state: FormState):
        self.state = state
        self.transitions.append(state)

    def _ensure_idle_network(self):
        if self.state == FormState.SUBMITTING:
            raise FormBusyError("A submission is already in progress")

    # Editing and validation

    def set_value(self, name: str, raw: Any):
        """Write a raw change value back into the form values"""
        field = self.config.get_field(name)
        if field is None:
            raise KeyError(f"Unknown field '{name}'")
        value = parse_field_value(field, raw)
        self.values[name] = value
        return value

    def _apply(self, result: ValidationResult):
        # Fresh map every pass, limited to fields the user has left
        self.errors = {
            name: message for name, message in result.errors.items()
            if name in self._touched
        }

    def blur(self, name: str) -> Optional[str]:
        """Validate when a field loses focus; returns that field's error"""
        if self.config.get_field(name) is None:
            raise KeyError(f"Unknown field '{name}'")

        previous = self.state
        if previous != FormState.SUBMITTING:
            self._set_state(FormState.VALIDATING)

        self._touched.add(name)
        self._apply(self.schema.safe_validate(self.values))

        if previous != FormState.SUBMITTING:
            self._set_state(previous)
        return self.errors.get(name)

    def validate(self) -> ValidationResult:
        """Full-form validation pass"""
        self._touched = {field.name for field in self.config.fields}
        result = self.schema.safe_validate(self.values)
        self._apply(result)
        return result

    # Submission

    async def submit(self) -> Optional[Dict[str, Any]]:
        """
        Validate every field and, when valid, send the payload to the webhook

        Returns:
            The webhook response on success, None otherwise
        """
        self._ensure_idle_network()

        previous = self.state
        self._set_state(FormState.VALIDATING)
        result = self.validate()
        if not result.valid:
            logger.info(f"Form for {self.config.tool_name or 'tool'} has {len(result.errors)} invalid field(s)")
            self._set_state(previous)
            return None

        self.last_submitted = dict(result.data)
        return await self._deliver(self.last_submitted, reset_values=True, persist=True)

    async def regenerate(self) -> Optional[Dict[str, Any]]:
        """Re-run the last validated payload without validating or saving history"""
        self._ensure_idle_network()
        if self.last_submitted is None:
            return None
        return await self._deliver(self.last_submitted, reset_values=False, persist=False)

    async def _deliver(
        self, payload: Dict[str, Any], reset_values: bool, persist: bool
    ) -> Optional[Dict[str, Any]]:
        self.response = None
        self.error = None
        self.error_message = None
        self._set_state(FormState.SUBMITTING)

        try:
            response = await self.webhook_client.submit(self.config.webhook_url, payload)
        except WebhookError as e:
            self._fail(e)
            return None
        except Exception as e:
            self._fail(e)
            raise

        self.response = response
        if persist:
            self._persist_in_background(payload, response)
        if reset_values:
            self._clear_inputs()
        self._set_state(FormState.SUCCESS)

        if self.on_success:
            self.on_success(response)
        return response

    def _fail(self, error: Exception):
        self.response = None
        self.error = error
        self.error_message = self.describe_error(error)
        self._set_state(FormState.ERROR)
        logger.warning(f"Form submission failed: {error}")

        if self.on_error:
            self.on_error(error)

    def describe_error(self, error: Exception) -> str:
        """User-visible text for a submission failure"""
        if isinstance(error, WebhookError) and str(error):
            return str(error)
        return self.config.messages.error

    def _clear_inputs(self):
        self.values = default_values(self.config)
        self.errors = {}
        self._touched = set()

    def reset(self):
        """Back to idle with default values"""
        self._ensure_idle_network()
        self._clear_inputs()
        self.response = None
        self.error = None
        self.error_message = None
        self.last_submitted = None
        self._set_state(FormState.IDLE)

    # History

    def _persist_in_background(self, payload: Dict[str, Any], response: Dict[str, Any]):
        if not (self.submission_store and self.user and self.config.tool_id and self.config.tool_name):
            return

        task = asyncio.create_task(self._persist(payload, response))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _persist(self, payload: Dict[str, Any], response: Dict[str, Any]):
        submission = SubmissionCreate(
            tool_id=self.config.tool_id,
            tool_name=self.config.tool_name,
            form_data=payload,
            result=response
        )
        try:
            await asyncio.to_thread(self.submission_store.create, self.user["user_id"], submission)
            logger.info(f"Saved submission for tool {self.config.tool_id}")
        except Exception as e:
            # History is best effort; the user already has their result
            logger.error(f"Failed to save submission for tool {self.config.tool_id}: {e}")

    async def wait_for_background(self):
        """Wait for pending history writes"""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # Result panel

    async def copy_result(self) -> Optional[str]:
        """
        Copy the current result to the clipboard

        Sets is_copied for copy_feedback_seconds. Returns the copied text, or
        None when there is nothing to copy or the clipboard failed.
        """
        if self.response is None:
            return None

        text = clipboard_text(resolve_display_content(self.response))
        try:
            if self.clipboard:
                self.clipboard(text)
        except Exception as e:
            logger.error(f"Failed to copy text: {e}")
            return None

        self.is_copied = True
        if self._copy_reset:
            self._copy_reset.cancel()
        self._copy_reset = asyncio.get_running_loop().call_later(
            self.copy_feedback_seconds, self._clear_copied
        )
        return text

    def _clear_copied(self):
        self.is_copied = False
        self._copy_reset = None

    def render(self) -> FormView:
        """Current view of the form"""
        result = None
        if self.response is not None:
            result = ResultPanel(
                title=self.config.result_title,
                content=resolve_display_content(self.response),
                is_copied=self.is_copied,
                is_regenerating=self.state == FormState.SUBMITTING,
            )

        error = self.error_message if self.state == FormState.ERROR else None
        return FormView(
            state=self.state,
            fields=render_form(self.config, self.values, self.errors),
            result=result,
            error=error,
            status_message=self.config.messages.success if result is None and error is None else None,
            submit_disabled=self.state == FormState.SUBMITTING,
        )
