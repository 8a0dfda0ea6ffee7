"""Tool catalogue and dynamic form endpoints"""
from fastapi import APIRouter, BackgroundTasks, HTTPException, Depends
from typing import Any, Dict, List, Optional
import logging

from app.config import Settings, get_settings
from app.database import get_supabase_admin
from app.middleware.auth import get_optional_user
from app.models.forms import FormSubmitRequest, FormSubmitResponse, ValidateRequest, ValidateResponse
from app.models.tools import Tool, ToolConfigError, ToolDetail, build_form_config
from app.routers.submissions import get_submission_store
from app.services.form_controller import DynamicFormController, FormState
from app.services.submission_service import SubmissionStore
from app.services.tool_service import ToolNotFoundError, ToolStore
from app.services.webhook_service import WebhookClient

logger = logging.getLogger(__name__)
router = APIRouter()


def get_tool_store() -> ToolStore:
    return ToolStore(get_supabase_admin())


def get_webhook_client(settings: Settings = Depends(get_settings)) -> WebhookClient:
    return WebhookClient.from_settings(settings)


def _load_tool(store: ToolStore, slug: str) -> Tool:
    try:
        return store.get_by_slug(slug)
    except ToolNotFoundError:
        raise HTTPException(status_code=404, detail="Tool not found")


def _build_controller(
    tool: Tool,
    webhook_client: WebhookClient,
    values: Dict[str, Any],
    settings: Settings,
    submission_store: Optional[SubmissionStore] = None,
    user: Optional[Dict] = None
) -> DynamicFormController:
    try:
        config = build_form_config(tool)
    except ToolConfigError as e:
        logger.error(f"Cannot build form for tool {tool.id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    controller = DynamicFormController(
        config,
        webhook_client,
        submission_store=submission_store,
        user=user,
        copy_feedback_seconds=settings.copy_feedback_seconds
    )
    for field in controller.config.fields:
        if field.name in values:
            controller.set_value(field.name, values[field.name])
    return controller


def _submit_response(controller: DynamicFormController) -> FormSubmitResponse:
    if controller.state == FormState.ERROR:
        raise HTTPException(status_code=502, detail={
            "message": controller.error_message,
            "status": getattr(controller.error, "status", 0)
        })

    view = controller.render()
    return FormSubmitResponse(
        state=controller.state.value,
        result=view.result.model_dump() if view.result else None,
        values=controller.values
    )


@router.get("", response_model=List[Tool])
async def list_tools(store: ToolStore = Depends(get_tool_store)):
    """Public tool listing"""
    try:
        return store.list_tools()
    except Exception as e:
        logger.error(f"Error listing tools: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{slug}", response_model=ToolDetail)
async def get_tool(
    slug: str,
    store: ToolStore = Depends(get_tool_store),
    webhook_client: WebhookClient = Depends(get_webhook_client),
    settings: Settings = Depends(get_settings)
):
    """Tool with the descriptor of its form in the initial state"""
    try:
        tool = _load_tool(store, slug)
        controller = _build_controller(tool, webhook_client, {}, settings)
        view = controller.render()

        return ToolDetail(
            tool=tool,
            form={
                "result_title": controller.config.result_title,
                "values": controller.values,
                **view.model_dump(mode="json")
            }
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching tool {slug}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{slug}/validate", response_model=ValidateResponse)
async def validate_tool_form(
    slug: str,
    request: ValidateRequest,
    store: ToolStore = Depends(get_tool_store),
    webhook_client: WebhookClient = Depends(get_webhook_client),
    settings: Settings = Depends(get_settings)
):
    """Validate one field (on blur) or the whole form"""
    try:
        tool = _load_tool(store, slug)
        controller = _build_controller(tool, webhook_client, request.values, settings)

        if request.field:
            if controller.config.get_field(request.field) is None:
                raise HTTPException(status_code=400, detail=f"Unknown field '{request.field}'")
            error = controller.blur(request.field)
            return ValidateResponse(valid=error is None, errors=controller.errors)

        result = controller.validate()
        return ValidateResponse(valid=result.valid, errors=result.errors)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Validation error for tool {slug}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{slug}/submit", response_model=FormSubmitResponse)
async def submit_tool_form(
    slug: str,
    request: FormSubmitRequest,
    background_tasks: BackgroundTasks,
    store: ToolStore = Depends(get_tool_store),
    submission_store: SubmissionStore = Depends(get_submission_store),
    webhook_client: WebhookClient = Depends(get_webhook_client),
    auth_data: Optional[Dict] = Depends(get_optional_user),
    settings: Settings = Depends(get_settings)
):
    """
    Validate and submit a tool form to its webhook

    History is written after the response is sent when the caller is
    signed in.
    """
    try:
        tool = _load_tool(store, slug)
        controller = _build_controller(
            tool, webhook_client, request.values, settings,
            submission_store=submission_store, user=auth_data
        )

        await controller.submit()
        background_tasks.add_task(controller.wait_for_background)

        if controller.state not in (FormState.SUCCESS, FormState.ERROR):
            raise HTTPException(status_code=422, detail={"errors": controller.errors})

        return _submit_response(controller)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Form submission error for tool {slug}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{slug}/regenerate", response_model=FormSubmitResponse)
async def regenerate_tool_result(
    slug: str,
    request: FormSubmitRequest,
    store: ToolStore = Depends(get_tool_store),
    webhook_client: WebhookClient = Depends(get_webhook_client),
    settings: Settings = Depends(get_settings)
):
    """
    Re-run a previously submitted payload without validating it again

    Regenerated results are not written to history.
    """
    try:
        tool = _load_tool(store, slug)
        controller = _build_controller(tool, webhook_client, {}, settings)
        field_names = {field.name for field in controller.config.fields}
        controller.last_submitted = {
            name: value for name, value in request.values.items()
            if name in field_names and value is not None
        }

        await controller.regenerate()
        return _submit_response(controller)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Regenerate error for tool {slug}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
