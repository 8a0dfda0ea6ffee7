"""Results history endpoints"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Optional
import logging

from app.config import Settings, get_settings
from app.database import get_supabase_admin
from app.middleware.auth import get_current_user
from app.models.submissions import PaginatedSubmissions, Submission
from app.services.submission_service import SubmissionNotFoundError, SubmissionStore

logger = logging.getLogger(__name__)
router = APIRouter()


def get_submission_store() -> SubmissionStore:
    return SubmissionStore(get_supabase_admin())


@router.get("", response_model=PaginatedSubmissions)
async def list_submissions(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    tool_id: Optional[str] = None,
    auth_data: Dict = Depends(get_current_user),
    store: SubmissionStore = Depends(get_submission_store),
    settings: Settings = Depends(get_settings)
):
    """Current user's submissions, newest first"""
    try:
        return store.paginate(
            auth_data["user_id"],
            page=page,
            page_size=page_size or settings.submissions_page_size,
            tool_id=tool_id
        )
    except Exception as e:
        logger.error(f"Error listing submissions: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{submission_id}", response_model=Submission)
async def get_submission(
    submission_id: str,
    auth_data: Dict = Depends(get_current_user),
    store: SubmissionStore = Depends(get_submission_store)
):
    """Get a single submission"""
    try:
        return store.get(auth_data["user_id"], submission_id)
    except SubmissionNotFoundError:
        raise HTTPException(status_code=404, detail="Submission not found")
    except Exception as e:
        logger.error(f"Error fetching submission {submission_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{submission_id}")
async def delete_submission(
    submission_id: str,
    auth_data: Dict = Depends(get_current_user),
    store: SubmissionStore = Depends(get_submission_store)
):
    """Delete a submission"""
    try:
        store.delete(auth_data["user_id"], submission_id)
        return {"success": True}
    except Exception as e:
        logger.error(f"Error deleting submission {submission_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
