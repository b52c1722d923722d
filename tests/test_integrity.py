# tests/test_integrity.py

import pytest

from flowsmith.builder.integrity import collect_issues, verify_document
from flowsmith.builder.model import (
    BooleanCondition,
    EmailSendParams,
    IfParams,
    Node,
    WebhookParams,
    WorkflowDocument,
    chain,
    connect,
)
from flowsmith.builder.scenarios import ScenarioCategory, build
from flowsmith.errors import TemplateIntegrityError
from flowsmith.utils.graph import build_graph, has_trigger, is_acyclic, port_targets


def _webhook(name="Hook", pos=(0, 0)):
    return Node(name=name, params=WebhookParams(path="p"), position=pos)


def _mail(name, pos=(200, 0)):
    return Node(name=name, params=EmailSendParams(to_email="a@b.c", subject="s", text="t"), position=pos)


def _if(name="Check", pos=(400, 0)):
    return Node(
        name=name,
        params=IfParams(conditions=(BooleanCondition(value1="={{ $json.ok }}", value2=True),)),
        position=pos,
    )


def _tags(issues):
    return {it.split("]")[0] + "]" for it in issues}


@pytest.mark.parametrize("category", list(ScenarioCategory))
def test_scenarios_have_no_issues(category):
    doc = build(category, "clean")
    assert collect_issues(doc) == []

    G = build_graph(doc)
    assert is_acyclic(G)
    assert has_trigger(doc)


def test_dangling_edge_and_unknown_source():
    doc = WorkflowDocument(
        name="broken",
        nodes=(_webhook(), _mail("Mail")),
        connections={**chain("Hook", "Mail"), "Ghost": connect(("Mail",)), "Mail": connect(("Nowhere",))},
    )
    issues = collect_issues(doc)
    assert any("Dangling edge Mail[0] -> 'Nowhere'" in it for it in issues)
    assert any("Connection source 'Ghost'" in it for it in issues)
    with pytest.raises(TemplateIntegrityError) as exc:
        verify_document(doc)
    assert exc.value.issues == issues


def test_duplicate_names():
    doc = WorkflowDocument(name="dup", nodes=(_webhook(), _mail("Hook")), connections={})
    assert "[NAME]" in _tags(collect_issues(doc))


def test_cycle_detected():
    doc = WorkflowDocument(
        name="loop",
        nodes=(_webhook(), _mail("A"), _mail("B", pos=(400, 0))),
        connections={**chain("Hook", "A", "B"), "B": connect(("A",))},
    )
    assert "[CYCLE]" in _tags(collect_issues(doc))


def test_conditional_needs_both_ports():
    doc = WorkflowDocument(
        name="half-if",
        nodes=(_webhook(), _if(), _mail("Yes", pos=(600, 0))),
        connections={**chain("Hook", "Check"), "Check": connect(("Yes",))},
    )
    assert "[PORTS]" in _tags(collect_issues(doc))


def test_single_output_node_with_two_ports():
    doc = WorkflowDocument(
        name="fork",
        nodes=(_webhook(), _mail("A"), _mail("B", pos=(200, 200))),
        connections={"Hook": connect(("A",), ("B",))},
    )
    assert "[PORTS]" in _tags(collect_issues(doc))


def test_unreachable_node_reported():
    doc = WorkflowDocument(name="island", nodes=(_webhook(), _mail("Alone")), connections={})
    issues = collect_issues(doc)
    assert issues == ["[REACH] Nodes not reachable from any trigger: ['Alone']"]


def test_empty_document_fails_schema():
    doc = WorkflowDocument(name="empty", nodes=(), connections={})
    assert "[SCHEMA]" in _tags(collect_issues(doc))


def test_port_targets_for_branch():
    G = build_graph(build("approval", "ports"))
    assert port_targets(G, "Is Approved?") == {0: ["Log Approval"], 1: ["Notify Rejection"]}
