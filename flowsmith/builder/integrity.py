# flowsmith/builder/integrity.py

from collections import Counter
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from .schema import WORKFLOW_DOCUMENT_SCHEMA
from flowsmith.builder.model import WorkflowDocument
from flowsmith.errors import TemplateIntegrityError
from flowsmith.utils.graph import build_graph, is_acyclic, unreachable_from_triggers
from flowsmith.utils.logger import get_logger

logger = get_logger("integrity")

_VALIDATOR = Draft7Validator(WORKFLOW_DOCUMENT_SCHEMA)


def collect_issues(document: WorkflowDocument) -> List[str]:
    """
    Check a freshly built document against the graph invariants.
    Returns human-readable issues, empty when the document is sound.
    """
    issues: List[str] = []

    # 1) Wire contract
    payload: Dict[str, Any] = document.to_dict()
    for err in sorted(_VALIDATOR.iter_errors(payload), key=lambda e: [str(p) for p in e.path]):
        where = "/".join(str(p) for p in err.path) or "<root>"
        issues.append(f"[SCHEMA] {where}: {err.message}")

    # 2) Unique names
    counts = Counter(document.node_names())
    for name, c in counts.items():
        if c > 1:
            issues.append(f"[NAME] Node name '{name}' used {c} times")

    # 3) Referential integrity
    names = set(counts)
    for src in document.connections:
        if src not in names:
            issues.append(f"[REF] Connection source '{src}' is not a node")
    for src, port, e in document.edges():
        if e.node not in names:
            issues.append(f"[REF] Dangling edge {src}[{port}] -> '{e.node}'")

    # 4) Port arity: a node never publishes more ports than it has outcomes,
    #    and a multi-outcome node publishes one array per outcome
    for n in document.nodes:
        for kind, ports in document.connections.get(n.name, {}).items():
            if len(ports) > n.output_ports:
                issues.append(
                    f"[PORTS] '{n.name}' publishes {len(ports)} '{kind}' ports, "
                    f"type {n.type} has {n.output_ports}"
                )
            elif n.output_ports > 1 and len(ports) != n.output_ports:
                issues.append(
                    f"[PORTS] '{n.name}' must publish {n.output_ports} '{kind}' ports, "
                    f"got {len(ports)}"
                )

    # 5) Graph shape
    G = build_graph(document)
    if not is_acyclic(G):
        issues.append("[CYCLE] Workflow contains a directed cycle")
    unreachable = unreachable_from_triggers(document, G)
    if unreachable:
        issues.append(f"[REACH] Nodes not reachable from any trigger: {unreachable}")

    return issues


def verify_document(document: WorkflowDocument) -> None:
    """Raise TemplateIntegrityError if `document` breaks any invariant."""
    issues = collect_issues(document)
    if issues:
        for it in issues:
            logger.error("integrity: %s", it)
        raise TemplateIntegrityError(document.name, issues)
