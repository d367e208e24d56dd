from __future__ import annotations

from pathlib import Path

import networkx as nx

from github_connections.logging import get_logger
from github_connections.models.result import ConnectionResult
from github_connections.usernames import normalize

LOGGER = get_logger(__name__)


def build_connection_graph(result: ConnectionResult) -> nx.DiGraph:
    graph = nx.DiGraph()

    for username, profile in result.profiles.items():
        graph.add_node(
            username,
            label=profile.display_name,
            login=profile.login,
            followers=profile.follower_count,
            following=profile.following_count,
        )

    for source, targets in result.edges.items():
        for position, target in enumerate(targets):
            graph.add_edge(source, normalize(target.login), position=position)

    LOGGER.debug(
        "Graph contains %d nodes and %d edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


def export_graphml(graph: nx.DiGraph, path: Path) -> None:
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    nx.write_graphml(graph, path)
    LOGGER.info("Graph written to %s", path)


__all__ = ["build_connection_graph", "export_graphml"]
