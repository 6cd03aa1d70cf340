# flowaudit/structural/metrics.py

from typing import Any, Dict

import networkx as nx

from flowaudit.model.workflow import Workflow
from flowaudit.utils.graph import build_graph


def compute_graph_metrics(workflow: Workflow) -> Dict[str, Any]:
    """
    Shape metrics of the workflow graph, reported alongside the analysis
    scores. Ratios are in [0, 1]; an empty graph is vacuously acyclic.
    """
    G = build_graph(workflow)
    n_nodes = G.number_of_nodes()
    if n_nodes == 0:
        return {
            "n_nodes": 0,
            "n_edges": 0,
            "connected_ratio": 0.0,
            "acyclic": True,
            "orphan_ratio": 0.0,
            "avg_out_degree": 0.0,
            "longest_path": 0,
        }

    # proportion of nodes in the largest weakly connected component
    largest_cc = max(nx.weakly_connected_components(G), key=len)
    connected_ratio = len(largest_cc) / n_nodes

    acyclic = nx.is_directed_acyclic_graph(G)

    orphans = [n for n in G.nodes if G.in_degree(n) == 0 and G.out_degree(n) == 0]

    avg_out = sum(dict(G.out_degree()).values()) / n_nodes

    # only meaningful on a DAG; cyclic graphs report -1
    longest_path = nx.dag_longest_path_length(G) if acyclic else -1

    return {
        "n_nodes": n_nodes,
        "n_edges": G.number_of_edges(),
        "connected_ratio": round(connected_ratio, 2),
        "acyclic": acyclic,
        "orphan_ratio": round(len(orphans) / n_nodes, 2),
        "avg_out_degree": round(avg_out, 2),
        "longest_path": longest_path,
    }
