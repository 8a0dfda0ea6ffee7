"""Tool submission history backed by Supabase"""
import math
import logging
from typing import List, Optional
from supabase import Client

from app.models.submissions import PaginatedSubmissions, Submission, SubmissionCreate
from app.utils.retry import retry_supabase_query

logger = logging.getLogger(__name__)

TABLE = "tool_submissions"


class PersistenceError(Exception):
    """Record store read or write failed"""


class SubmissionNotFoundError(Exception):
    """No submission with that id for this user"""


class SubmissionStore:
    """
    Submission Record Store

    Every query is scoped to the owning user's id, the service-role
    equivalent of row level security.
    """

    def __init__(self, client: Client):
        self.client = client

    def _run(self, action: str, query_func):
        try:
            return retry_supabase_query(query_func)
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}: {e}") from e

    def create(self, user_id: str, submission: SubmissionCreate) -> Submission:
        """Save a user's form input and webhook result"""
        result = self._run("create submission", lambda: self.client.table(TABLE).insert({
            "user_id": user_id,
            "tool_id": submission.tool_id,
            "tool_name": submission.tool_name,
            "form_data": submission.form_data,
            "result": submission.result,
            "status": "success"
        }).execute())

        if not result.data:
            raise PersistenceError("Failed to create submission: no row returned")
        return Submission(**result.data[0])

    def list_for_user(self, user_id: str) -> List[Submission]:
        """All of a user's submissions, newest first"""
        result = self._run("fetch submissions", lambda: self.client.table(TABLE).select("*").eq(
            "user_id", user_id
        ).order("created_at", desc=True).execute())
        return [Submission(**row) for row in result.data or []]

    def paginate(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 12,
        tool_id: Optional[str] = None
    ) -> PaginatedSubmissions:
        """One page of a user's submissions, optionally for a single tool"""
        start = (page - 1) * page_size
        end = start + page_size - 1

        def query():
            q = self.client.table(TABLE).select("*", count="exact").eq("user_id", user_id)
            if tool_id:
                q = q.eq("tool_id", tool_id)
            return q.order("created_at", desc=True).range(start, end).execute()

        result = self._run("fetch submissions", query)
        total = result.count or 0

        return PaginatedSubmissions(
            data=[Submission(**row) for row in result.data or []],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if page_size else 0
        )

    def get(self, user_id: str, submission_id: str) -> Submission:
        result = self._run("fetch submission", lambda: self.client.table(TABLE).select("*").eq(
            "id", submission_id
        ).eq("user_id", user_id).limit(1).execute())

        if not result.data:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")
        return Submission(**result.data[0])

    def delete(self, user_id: str, submission_id: str) -> None:
        self._run("delete submission", lambda: self.client.table(TABLE).delete().eq(
            "id", submission_id
        ).eq("user_id", user_id).execute())
