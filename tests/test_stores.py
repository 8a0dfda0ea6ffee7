from types import SimpleNamespace
import pytest

from app.models.submissions import SubmissionCreate
from app.services.submission_service import PersistenceError, SubmissionNotFoundError, SubmissionStore
from app.services.tool_service import ToolNotFoundError, ToolStore


class FakeQuery:
    """Chainable stand-in for a Supabase table query"""

    def __init__(self, client, table):
        self.client = client
        self.calls = [("table", table)]

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    def execute(self):
        self.client.queries.append(self.calls)
        if self.client.error:
            raise self.client.error
        return SimpleNamespace(data=self.client.rows, count=self.client.count)


class FakeSupabase:
    def __init__(self, rows=None, count=None, error=None):
        self.rows = rows if rows is not None else []
        self.count = count
        self.error = error
        self.queries = []

    def table(self, name):
        return FakeQuery(self, name)


def _row(**kwargs):
    row = {
        "id": "sub-1",
        "user_id": "user-1",
        "tool_id": "tool-1",
        "tool_name": "Idea Analyzer",
        "form_data": {"idea": "sell snow"},
        "result": {"result": "ok"},
        "status": "success",
        "created_at": "2026-01-01T00:00:00Z",
    }
    row.update(kwargs)
    return row


def test_create_inserts_success_record():
    client = FakeSupabase(rows=[_row()])
    store = SubmissionStore(client)

    saved = store.create("user-1", SubmissionCreate(
        tool_id="tool-1", tool_name="Idea Analyzer", form_data={"idea": "sell snow"}, result={"result": "ok"}
    ))

    assert saved.id == "sub-1"
    insert = [c for c in client.queries[0] if c[0] == "insert"][0]
    assert insert[1][0]["status"] == "success"
    assert insert[1][0]["user_id"] == "user-1"


def test_paginate_computes_range_and_pages():
    client = FakeSupabase(rows=[_row()], count=25)
    store = SubmissionStore(client)

    page = store.paginate("user-1", page=2, page_size=12, tool_id="tool-1")

    assert page.total == 25
    assert page.total_pages == 3
    calls = client.queries[0]
    assert ("range", (12, 23), {}) in calls
    assert ("eq", ("tool_id", "tool-1"), {}) in calls
    assert ("order", ("created_at",), {"desc": True}) in calls


def test_get_missing_submission():
    store = SubmissionStore(FakeSupabase(rows=[]))
    with pytest.raises(SubmissionNotFoundError):
        store.get("user-1", "nope")


def test_store_errors_become_persistence_errors():
    store = SubmissionStore(FakeSupabase(error=RuntimeError("permission denied")))
    with pytest.raises(PersistenceError):
        store.list_for_user("user-1")


def test_tool_lookup_by_slug():
    client = FakeSupabase(rows=[{"id": "tool-1", "name": "Idea Analyzer", "url": "/tools/idea-analyzer"}])
    tool = ToolStore(client).get_by_slug("idea-analyzer")

    assert tool.slug == "idea-analyzer"
    assert ("eq", ("url", "/tools/idea-analyzer"), {}) in client.queries[0]


def test_tool_lookup_missing():
    with pytest.raises(ToolNotFoundError):
        ToolStore(FakeSupabase(rows=[])).get_by_id("nope")


def test_list_for_user_is_scoped_and_newest_first():
    client = FakeSupabase(rows=[_row(id="sub-2"), _row(id="sub-1")])

    submissions = SubmissionStore(client).list_for_user("user-1")

    assert [s.id for s in submissions] == ["sub-2", "sub-1"]
    calls = client.queries[0]
    assert ("eq", ("user_id", "user-1"), {}) in calls
    assert ("order", ("created_at",), {"desc": True}) in calls


def test_tool_lookup_by_id():
    client = FakeSupabase(rows=[{"id": "tool-1", "name": "Idea Analyzer"}])

    tool = ToolStore(client).get_by_id("tool-1")

    assert tool.name == "Idea Analyzer"
    assert ("eq", ("id", "tool-1"), {}) in client.queries[0]
