# utils/graph.py
from typing import Dict, List

import networkx as nx

from flowsmith.builder.model import WorkflowDocument


def build_graph(document: WorkflowDocument) -> nx.MultiDiGraph:
    """
    Build a directed multigraph keyed on node names.

    Node attributes: type, typeVersion, position, trigger.
    Edge attributes: port (source output index), kind (connection type), index (target input).
    Edges pointing at unknown names are still added so that callers can detect them
    (the target then carries no 'type' attribute).
    """
    G = nx.MultiDiGraph()
    for n in document.nodes:
        G.add_node(
            n.name,
            type=n.type,
            typeVersion=n.type_version,
            position=tuple(n.position),
            trigger=n.is_trigger,
        )

    for src, port, e in document.edges():
        G.add_edge(src, e.node, port=port, kind=e.type, index=e.index)
    return G


def has_trigger(document: WorkflowDocument) -> bool:
    return any(n.is_trigger for n in document.nodes)


def trigger_names(document: WorkflowDocument) -> List[str]:
    return [n.name for n in document.nodes if n.is_trigger]


def is_acyclic(G: nx.MultiDiGraph) -> bool:
    return nx.is_directed_acyclic_graph(G)


def unreachable_from_triggers(document: WorkflowDocument, G: nx.MultiDiGraph) -> List[str]:
    """Node names that no trigger reaches, in document order."""
    reached = set()
    for t in trigger_names(document):
        reached.add(t)
        reached |= nx.descendants(G, t)
    return [n.name for n in document.nodes if n.name not in reached]


def port_targets(G: nx.MultiDiGraph, source: str) -> Dict[int, List[str]]:
    """Map output port -> target node names for one source node."""
    out: Dict[int, List[str]] = {}
    for _src, dst, data in G.out_edges(source, data=True):
        out.setdefault(data.get("port", 0), []).append(dst)
    return out
