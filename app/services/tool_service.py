"""Tool records backed by Supabase"""
import logging
from typing import List
from supabase import Client

from app.models.tools import Tool
from app.services.submission_service import PersistenceError
from app.utils.retry import retry_supabase_query

logger = logging.getLogger(__name__)

TABLE = "tools"


class ToolNotFoundError(Exception):
    """No tool matches the lookup"""


class ToolStore:
    """Read access to tool definitions"""

    def __init__(self, client: Client):
        self.client = client

    def _run(self, query_func):
        try:
            return retry_supabase_query(query_func)
        except Exception as e:
            logger.error(f"Failed to fetch tools: {e}")
            raise PersistenceError(f"Failed to fetch tools: {e}") from e

    def list_tools(self) -> List[Tool]:
        """Public listing ordered by sort_order"""
        result = self._run(
            lambda: self.client.table(TABLE).select("*").order("sort_order").execute()
        )
        return [Tool(**row) for row in result.data or []]

    def get_by_slug(self, slug: str) -> Tool:
        """Tool whose url is /tools/<slug>"""
        result = self._run(lambda: self.client.table(TABLE).select("*").eq(
            "url", f"/tools/{slug}"
        ).limit(1).execute())

        if not result.data:
            raise ToolNotFoundError(f"Tool '{slug}' not found")
        return Tool(**result.data[0])

    def get_by_id(self, tool_id: str) -> Tool:
        result = self._run(lambda: self.client.table(TABLE).select("*").eq(
            "id", tool_id
        ).limit(1).execute())

        if not result.data:
            raise ToolNotFoundError(f"Tool {tool_id} not found")
        return Tool(**result.data[0])
