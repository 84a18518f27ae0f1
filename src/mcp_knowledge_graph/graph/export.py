"""
Graph exporters: JSON, GraphML and Cypher.

GraphML is built with ElementTree, so ids and text are XML-escaped, and
property bags are exported through one GraphML key per property name.

Cypher output quotes every identifier and literal. Node labels and
relationship types are backtick-quoted (embedded backticks doubled) and
strings are single-quoted with backslashes and quotes escaped, so
caller-supplied text cannot break out of a statement.
"""

import json
import math
import re
import xml.etree.ElementTree as ET
from typing import Any

from ..models.graph import Graph

GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"

# Cypher relationships must carry a type
FALLBACK_RELATIONSHIP = "RELATED_TO"

# Code points XML 1.0 does not allow anywhere in a document
_XML_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def to_json(graph: Graph) -> str:
    """Full node + edge dump, pretty-printed."""
    document = {
        "id": graph.id,
        "name": graph.name,
        "created_at": graph.created_at,
        "updated_at": graph.updated_at,
        "nodes": [
            {
                "id": n.id,
                "label": n.label,
                "type": n.type,
                "properties": n.properties,
                "created_at": n.created_at,
            }
            for n in graph.nodes.values()
        ],
        "edges": [
            {
                "id": e.id,
                "source": e.source,
                "target": e.target,
                "relationship": e.relationship,
                "weight": e.weight,
                "properties": e.properties,
                "created_at": e.created_at,
            }
            for e in graph.edges.values()
        ],
    }
    return json.dumps(document, indent=2, default=str)


# ---------------------------------------------------------------------------
# GraphML
# ---------------------------------------------------------------------------


def xml_safe(text: str) -> str:
    """Replace characters XML 1.0 forbids with U+FFFD."""
    return _XML_INVALID_CHARS.sub("\ufffd", text)


def _graphml_type(values: list[Any]) -> str:
    """Narrowest GraphML attr.type able to hold every value."""
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "long"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "double"
    return "string"


def _graphml_text(value: Any, attr_type: str) -> str:
    if attr_type == "boolean":
        return "true" if value else "false"
    if attr_type in ("long", "double"):
        return repr(value) if isinstance(value, float) else str(value)
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str, sort_keys=True)


def _property_keys(bags: list[dict[str, Any]], prefix: str) -> dict[str, tuple[str, str]]:
    """Map property name -> (key id, attr.type) across all bags, first-seen order."""
    values: dict[str, list[Any]] = {}
    for bag in bags:
        for name, value in bag.items():
            if value is not None:
                values.setdefault(name, []).append(value)
    return {name: (f"{prefix}{index}", _graphml_type(vals)) for index, (name, vals) in enumerate(values.items())}


def to_graphml(graph: Graph) -> str:
    """GraphML 1.0 document with labels, types, relationships, weights and properties."""
    ET.register_namespace("", GRAPHML_NS)
    root = ET.Element(f"{{{GRAPHML_NS}}}graphml")

    def key(key_id: str, domain: str, name: str, attr_type: str = "string") -> None:
        ET.SubElement(
            root,
            f"{{{GRAPHML_NS}}}key",
            {"id": key_id, "for": domain, "attr.name": xml_safe(name), "attr.type": attr_type},
        )

    key("label", "node", "label")
    key("type", "node", "type")
    key("relationship", "edge", "relationship")
    key("weight", "edge", "weight", "double")

    node_props = _property_keys([n.properties for n in graph.nodes.values()], "node_prop_")
    edge_props = _property_keys([e.properties for e in graph.edges.values()], "edge_prop_")
    for name, (key_id, attr_type) in node_props.items():
        key(key_id, "node", name, attr_type)
    for name, (key_id, attr_type) in edge_props.items():
        key(key_id, "edge", name, attr_type)

    g = ET.SubElement(root, f"{{{GRAPHML_NS}}}graph", {"id": xml_safe(graph.id), "edgedefault": "directed"})

    def data(parent: ET.Element, key_id: str, text: str) -> None:
        ET.SubElement(parent, f"{{{GRAPHML_NS}}}data", {"key": key_id}).text = xml_safe(text)

    for node in graph.nodes.values():
        el = ET.SubElement(g, f"{{{GRAPHML_NS}}}node", {"id": xml_safe(node.id)})
        data(el, "label", node.label)
        data(el, "type", node.type)
        for name, value in node.properties.items():
            if value is not None:
                key_id, attr_type = node_props[name]
                data(el, key_id, _graphml_text(value, attr_type))

    for edge in graph.edges.values():
        el = ET.SubElement(
            g,
            f"{{{GRAPHML_NS}}}edge",
            {"id": xml_safe(edge.id), "source": xml_safe(edge.source), "target": xml_safe(edge.target)},
        )
        data(el, "relationship", edge.relationship)
        data(el, "weight", repr(float(edge.weight)))
        for name, value in edge.properties.items():
            if value is not None:
                key_id, attr_type = edge_props[name]
                data(el, key_id, _graphml_text(value, attr_type))

    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'


# ---------------------------------------------------------------------------
# Cypher
# ---------------------------------------------------------------------------


def cypher_quote_identifier(name: str) -> str:
    """Backtick-quote a label / relationship type."""
    return "`" + name.replace("`", "``") + "`"


def cypher_literal(value: Any) -> str:
    """Render a Python value as a Cypher literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return "null"
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(cypher_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        return cypher_map(value)
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def cypher_map(props: dict[str, Any]) -> str:
    return "{" + ", ".join(f"{cypher_quote_identifier(str(k))}: {cypher_literal(v)}" for k, v in props.items()) + "}"


def cypher_property_value(value: Any) -> Any:
    """Neo4j property values are scalars or flat lists; nested values are stored as JSON text."""
    if isinstance(value, dict) or (
        isinstance(value, (list, tuple)) and any(isinstance(v, (dict, list, tuple)) for v in value)
    ):
        return json.dumps(value, default=str, sort_keys=True)
    return value


def _storable(props: dict[str, Any]) -> dict[str, Any]:
    return {k: cypher_property_value(v) for k, v in props.items()}


def to_cypher_statements(graph: Graph) -> list[str]:
    """One CREATE per node, one MATCH ... CREATE per edge (nodes matched by ``id``)."""
    statements: list[str] = []
    for node in graph.nodes.values():
        props = {**_storable(node.properties), "id": node.id, "label": node.label}
        label = f":{cypher_quote_identifier(node.type)}" if node.type else ""
        statements.append(f"CREATE ({label} {cypher_map(props)})")
    for edge in graph.edges.values():
        rel_props = {**_storable(edge.properties), "weight": edge.weight}
        statements.append(
            f"MATCH (a {{id: {cypher_literal(edge.source)}}}), (b {{id: {cypher_literal(edge.target)}}}) "
            f"CREATE (a)-[:{cypher_quote_identifier(edge.relationship or FALLBACK_RELATIONSHIP)} "
            f"{cypher_map(rel_props)}]->(b)"
        )
    return statements


def to_cypher(graph: Graph) -> str:
    return ";\n".join(to_cypher_statements(graph))
