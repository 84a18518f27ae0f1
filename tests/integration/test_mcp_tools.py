"""
Integration tests for the MCP tools exercised through the FastMCP Client interface.

Tests the full pipeline: MCP tool → KnowledgeGraphService → InMemoryGraphStorage.
No external services required.
"""

import json

import pytest
from fastmcp import Client

from mcp_knowledge_graph import mcp_server
from mcp_knowledge_graph.mcp_server import mcp
from mcp_knowledge_graph.storage.memory import InMemoryGraphStorage

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_tool_result(result) -> dict:
    """Parse a FastMCP CallToolResult into a dict."""
    return json.loads(result.content[0].text)


ALICE = {"id": "a", "label": "Alice", "type": "person", "properties": {"role": "engineer"}}
BOB = {"id": "b", "label": "Bob", "type": "person"}
ACME = {"id": "acme", "label": "ACME", "type": "company"}


@pytest.fixture
async def client(monkeypatch):
    """FastMCP client backed by a fresh in-memory storage."""

    async def memory_storage(storage_settings=None):
        return InMemoryGraphStorage()

    monkeypatch.setattr(mcp_server, "create_storage_instance", memory_storage)
    async with Client(mcp) as c:
        yield c


async def call(client: Client, tool: str, **arguments) -> dict:
    return parse_tool_result(await client.call_tool(tool, arguments))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestToolRegistration:
    @pytest.mark.asyncio
    async def test_all_tools_listed(self, client):
        names = {tool.name for tool in await client.list_tools()}
        assert names == {
            "create_graph",
            "add_relationship",
            "query_graph",
            "analyze_graph",
            "export_graph",
            "merge_graphs",
            "list_graphs",
            "delete_graph",
        }


class TestGraphLifecycle:
    @pytest.mark.asyncio
    async def test_build_query_analyze_export(self, client):
        created = await call(client, "create_graph", name="research", entities=[ALICE])
        graph_id = created["graph_id"]
        assert created["node_count"] == 1

        added = await call(
            client,
            "add_relationship",
            graph_id=graph_id,
            source=ALICE,
            target=ACME,
            relationship="works_for",
            weight=0.8,
        )
        assert added["success"] is True
        assert added["node_count"] == 2

        await call(client, "add_relationship", graph_id=graph_id, source=ALICE, target=BOB, relationship="knows", bidirectional=True)

        neighbors = await call(client, "query_graph", graph_id=graph_id, start_node="b", query_type="neighbors", max_depth=2)
        assert [n["id"] for n in neighbors["neighbors"]] == ["a", "acme"]

        path = await call(client, "query_graph", graph_id=graph_id, start_node="b", query_type="path", end_node="acme")
        assert path["path_count"] == 1
        assert [n["id"] for n in path["paths"][0]] == ["b", "a", "acme"]
        assert path["truncated"] is False

        stats = await call(client, "analyze_graph", graph_id=graph_id)
        assert stats["node_count"] == 3
        assert stats["edge_count"] == 2
        assert stats["node_types"] == {"person": 2, "company": 1}

        exported = await call(client, "export_graph", graph_id=graph_id, format="json")
        document = json.loads(exported["data"])
        assert len(document["nodes"]) == 3
        assert len(document["edges"]) == 2

        cypher = await call(client, "export_graph", graph_id=graph_id, format="cypher")
        assert cypher["statement_count"] == 5

    @pytest.mark.asyncio
    async def test_merge_list_delete(self, client):
        first = (await call(client, "create_graph", name="g1", entities=[ALICE]))["graph_id"]
        second = (
            await call(
                client,
                "create_graph",
                name="g2",
                entities=[{"id": "a", "label": "Alice", "type": "person", "properties": {"city": "Paris"}}],
            )
        )["graph_id"]

        merged = await call(client, "merge_graphs", graph_ids=[first, second], new_name="combined")
        assert merged["name"] == "combined"
        assert merged["node_count"] == 1
        assert merged["conflict_count"] == 1
        assert merged["conflicts"][0]["resolution"] == "merged_properties"

        listed = await call(client, "list_graphs")
        assert listed["success"] is True
        assert {first, second, merged["merged_graph_id"]} <= {g["graph_id"] for g in listed["graphs"]}

        deleted = await call(client, "delete_graph", graph_id=first)
        assert deleted["success"] is True

        missing = await call(client, "analyze_graph", graph_id=first)
        assert missing["success"] is False
        assert missing["error_type"] == "not_found"


class TestFreeTextLabels:
    @pytest.mark.asyncio
    async def test_empty_relationship_exports_with_fallback_type(self, client):
        graph_id = (await call(client, "create_graph", name=""))["graph_id"]
        added = await call(client, "add_relationship", graph_id=graph_id, source=ALICE, target=BOB, relationship="")
        assert added["success"] is True

        cypher = await call(client, "export_graph", graph_id=graph_id, format="cypher")
        assert "[:`RELATED_TO` " in cypher["data"]


class TestToolErrors:
    @pytest.mark.asyncio
    async def test_unknown_graph(self, client):
        result = await call(client, "query_graph", graph_id="graph_missing", start_node="a")
        assert result == {"success": False, "error": "Graph not found: graph_missing", "error_type": "not_found"}

    @pytest.mark.asyncio
    async def test_path_without_end_node(self, client):
        graph_id = (await call(client, "create_graph", name="g"))["graph_id"]
        result = await call(client, "query_graph", graph_id=graph_id, start_node="a", query_type="path")
        assert result["success"] is False
        assert result["error_type"] == "invalid_argument"

    @pytest.mark.asyncio
    async def test_depth_above_limit(self, client):
        graph_id = (await call(client, "create_graph", name="g"))["graph_id"]
        result = await call(client, "query_graph", graph_id=graph_id, start_node="a", max_depth=500)
        assert result["error_type"] == "invalid_argument"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tool,arguments",
        [
            ("query_graph", {"graph_id": "graph_x", "start_node": ""}),
            ("analyze_graph", {"graph_id": "graph_x", "analysis_type": "pagerank"}),
            ("export_graph", {"graph_id": "graph_x", "format": "csv"}),
            ("merge_graphs", {"graph_ids": ["graph_x"]}),
            ("add_relationship", {"graph_id": "graph_x", "source": {"id": "a"}, "target": BOB, "relationship": "r"}),
        ],
    )
    async def test_invalid_arguments(self, client, tool, arguments):
        result = await call(client, tool, **arguments)
        assert result["success"] is False
        assert result["error_type"] == "invalid_argument"

    @pytest.mark.asyncio
    async def test_merge_with_missing_graph(self, client):
        graph_id = (await call(client, "create_graph", name="g"))["graph_id"]
        result = await call(client, "merge_graphs", graph_ids=[graph_id, "graph_missing"])
        assert result["error_type"] == "not_found"
