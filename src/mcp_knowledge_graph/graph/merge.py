"""Multi-graph merge with node conflict resolution.

Policies for a node id present in more than one input:

    keep_first        existing node unchanged
    keep_last         incoming node replaces the existing one entirely
    merge_properties  incoming property bag shallow-merged onto the existing
                      one (incoming keys win); label/type of the existing
                      node are kept

Edges are never deduplicated: every input edge is copied under a fresh id.
The merged adjacency index is the union of the inputs' adjacency entries,
so reverse entries written for bidirectional relationships survive.
"""

import logging

from ..models.graph import Edge, Graph, new_edge_id, utc_now_iso
from ..models.responses import MergeConflict
from ..models.validators import CONFLICT_RESOLUTIONS

logger = logging.getLogger(__name__)

_RESOLUTION_LABELS = {
    "keep_first": "kept_first",
    "keep_last": "kept_last",
    "merge_properties": "merged_properties",
}


class GraphMerger:
    """Accumulates input graphs into a new merged graph.

    Inputs are read only; nodes and edges are copied into the accumulator.
    """

    def __init__(self, merged: Graph, conflict_resolution: str = "merge_properties"):
        if conflict_resolution not in CONFLICT_RESOLUTIONS:
            raise ValueError(f"Unknown conflict resolution: {conflict_resolution}")
        self.merged = merged
        self.conflict_resolution = conflict_resolution
        self.conflicts: list[MergeConflict] = []

    def add(self, graph: Graph) -> None:
        """Fold *graph* into the accumulator."""
        for node_id, node in graph.nodes.items():
            existing = self.merged.nodes.get(node_id)
            if existing is None:
                self.merged.add_node(node.model_copy(deep=True))
                continue

            if self.conflict_resolution == "keep_last":
                self.merged.replace_node(node.model_copy(deep=True))
            elif self.conflict_resolution == "merge_properties":
                existing.properties = {**existing.properties, **node.properties}
            self.conflicts.append(
                MergeConflict(
                    node_id=node_id,
                    graph_id=graph.id,
                    resolution=_RESOLUTION_LABELS[self.conflict_resolution],
                )
            )

        for edge in graph.edges.values():
            copied = Edge(
                id=new_edge_id(),
                source=edge.source,
                target=edge.target,
                relationship=edge.relationship,
                weight=edge.weight,
                properties=dict(edge.properties),
                created_at=edge.created_at,
            )
            self.merged.add_edge(copied)

        for source, targets in graph.adjacency.items():
            for target in targets:
                self.merged.connect(source, target)

        self.merged.touch(utc_now_iso())
        logger.debug(
            f"Merged {graph.id} into {self.merged.id}: "
            f"{self.merged.node_count} nodes, {self.merged.edge_count} edges, {len(self.conflicts)} conflicts"
        )
