"""Submission history Pydantic models"""
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional


class SubmissionCreate(BaseModel):
    """Payload appended to the submission history after a successful run"""
    tool_id: str
    tool_name: str
    form_data: Dict[str, Any]
    result: Any


class Submission(BaseModel):
    """Persisted tool submission"""
    id: str
    user_id: Optional[str] = None
    tool_id: str
    tool_name: str
    form_data: Dict[str, Any]
    result: Any = None
    status: Literal["success", "pending", "failed"] = "success"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PaginatedSubmissions(BaseModel):
    """One page of a user's submissions"""
    data: List[Submission]
    total: int
    page: int
    page_size: int
    total_pages: int
