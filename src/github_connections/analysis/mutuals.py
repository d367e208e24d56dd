from __future__ import annotations

from typing import List, Tuple

from github_connections.analysis.graph_builder import build_connection_graph
from github_connections.models.result import ConnectionResult


def find_mutual_pairs(result: ConnectionResult) -> List[Tuple[str, str]]:
    """Return pairs of display names that follow each other."""
    graph = build_connection_graph(result)

    pairs = set()
    for source, target in graph.edges():
        if source < target and graph.has_edge(target, source):
            pairs.add((source, target))

    labelled = [
        tuple(sorted((graph.nodes[a].get("label", a), graph.nodes[b].get("label", b)), key=str.casefold))
        for a, b in pairs
    ]
    return sorted(labelled, key=lambda pair: (pair[0].casefold(), pair[1].casefold()))


__all__ = ["find_mutual_pairs"]
