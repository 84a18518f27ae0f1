#!/usr/bin/env python3
"""
Export knowledge graphs from the configured storage backend.

Reads storage settings from MCP_KG_STORAGE_* (use the redis backend; the
memory backend is empty in a fresh process).

Usage:
    # List stored graphs
    MCP_KG_STORAGE_BACKEND=redis python scripts/export_graph.py --list

    # Export one graph as GraphML to a file
    MCP_KG_STORAGE_BACKEND=redis python scripts/export_graph.py graph_1234 --format graphml -o graph.graphml

    # Cypher statements to stdout
    MCP_KG_STORAGE_BACKEND=redis python scripts/export_graph.py graph_1234 --format cypher
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcp_knowledge_graph.exceptions import KnowledgeGraphError  # noqa: E402
from mcp_knowledge_graph.services.graph_service import KnowledgeGraphService  # noqa: E402
from mcp_knowledge_graph.storage.factory import create_storage_instance  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def list_graphs(service: KnowledgeGraphService) -> None:
    summaries = await service.list_graphs()
    if not summaries:
        logger.info("No graphs stored")
        return
    for s in summaries:
        print(f"{s.graph_id}\t{s.name}\t{s.node_count} nodes\t{s.edge_count} edges\tupdated {s.updated_at}")


async def export_graph(service: KnowledgeGraphService, graph_id: str, fmt: str, output: Path | None) -> None:
    result = await service.export_graph(graph_id, fmt)
    if output is None:
        print(result.data)
    else:
        output.write_text(result.data, encoding="utf-8")
        logger.info(f"Wrote {result.node_count} nodes / {result.edge_count} edges as {fmt} to {output}")


async def run(args: argparse.Namespace) -> int:
    try:
        storage = await create_storage_instance()
    except KnowledgeGraphError as e:
        logger.error(str(e))
        return 1

    service = KnowledgeGraphService(storage)
    try:
        if args.list:
            await list_graphs(service)
        else:
            await export_graph(service, args.graph_id, args.format, args.output)
    except KnowledgeGraphError as e:
        logger.error(str(e))
        return 1
    finally:
        await storage.close()
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Export knowledge graphs from storage")
    parser.add_argument("graph_id", nargs="?", help="Graph to export")
    parser.add_argument("--list", action="store_true", help="List stored graphs instead of exporting")
    parser.add_argument("--format", choices=["json", "graphml", "cypher"], default="json", help="Export format")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    args = parser.parse_args()

    if not args.list and not args.graph_id:
        parser.error("graph_id is required unless --list is given")

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
