from __future__ import annotations

import networkx as nx

from github_connections.analysis.graph_builder import build_connection_graph, export_graphml
from github_connections.analysis.mutuals import find_mutual_pairs
from github_connections.models.profile import UserProfile
from github_connections.models.result import ConnectionResult


def make_result() -> ConnectionResult:
    people = {
        login: UserProfile(login=login.title(), display_name=name, follower_count=5, following_count=3)
        for login, name in [("alice", "Alice"), ("bob", "Bob"), ("carol", "carol c"), ("dan", "Dan")]
    }
    return ConnectionResult(
        profiles=people,
        edges={
            "alice": [people["bob"], people["carol"]],
            "bob": [people["alice"]],
            "carol": [people["alice"], people["dan"]],
            "dan": [people["carol"]],
        },
    )


def test_graph_has_a_node_per_profile_and_an_edge_per_follow() -> None:
    graph = build_connection_graph(make_result())

    assert set(graph.nodes) == {"alice", "bob", "carol", "dan"}
    assert graph.number_of_edges() == 6
    assert graph.has_edge("alice", "carol")
    assert not graph.has_edge("dan", "alice")
    assert graph.nodes["carol"]["label"] == "carol c"


def test_mutual_pairs_by_display_name() -> None:
    assert find_mutual_pairs(make_result()) == [("Alice", "Bob"), ("Alice", "carol c"), ("carol c", "Dan")]


def test_mutual_pairs_empty_without_reciprocal_follows() -> None:
    alice = UserProfile(login="alice", display_name="Alice")
    bob = UserProfile(login="bob", display_name="Bob")
    result = ConnectionResult(profiles={"alice": alice, "bob": bob}, edges={"alice": [bob], "bob": []})

    assert find_mutual_pairs(result) == []


def test_export_graphml_round_trips(tmp_path) -> None:
    path = tmp_path / "out" / "graph.graphml"

    export_graphml(build_connection_graph(make_result()), path)

    loaded = nx.read_graphml(path)
    assert loaded.number_of_nodes() == 4
    assert loaded.number_of_edges() == 6
