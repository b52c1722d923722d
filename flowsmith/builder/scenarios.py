# flowsmith/builder/scenarios.py
"""
Workflow graph builder.

`build(category, name)` picks the fixed template for a scenario category, stamps
`name` into the document root and returns the assembled WorkflowDocument.
The function is pure: same inputs, same document.

Topologies:
  sync      Webhook -> Supabase Get -> External API -> Supabase Update
  approval  Start Request -> Send Email -> Wait for Approval -> Is Approved?
                Is Approved?[0] (true)  -> Log Approval
                Is Approved?[1] (false) -> Notify Rejection
  payroll   Monthly Schedule -> Fetch Employees -> Calculate Net -> Send Payslip
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple, Union

from flowsmith.builder.integrity import verify_document
from flowsmith.builder.model import (
    BooleanCondition,
    CronParams,
    EmailSendParams,
    FunctionParams,
    HttpRequestParams,
    IfParams,
    Node,
    SupabaseParams,
    WaitParams,
    WebhookParams,
    WorkflowDocument,
    chain,
    connect,
)
from flowsmith.errors import UnsupportedScenario
from flowsmith.utils.logger import get_logger

logger = get_logger("builder")


class ScenarioCategory(str, Enum):
    SYNC = "sync"
    APPROVAL = "approval"
    PAYROLL = "payroll"


@dataclass(frozen=True)
class ScenarioInfo:
    category: ScenarioCategory
    title: str
    summary: str


SCENARIOS: Tuple[ScenarioInfo, ...] = (
    ScenarioInfo(ScenarioCategory.SYNC, "Synchronization", "Webhook -> External API -> Update store"),
    ScenarioInfo(ScenarioCategory.APPROVAL, "Approval (email)", "Email -> Wait for click -> Condition"),
    ScenarioInfo(ScenarioCategory.PAYROLL, "Payroll & HR", "Cron -> Compute net -> Send payslip"),
)

# Constants shared by the templates
SUPABASE_CREDENTIALS = {"supabaseApi": {"id": "supabase-cred-id", "name": "Supabase account"}}
EXTERNAL_SYNC_URL = "https://api.external-service.gouv/sync"
PAYROLL_CRON = "0 9 25 * *"
NET_FACTOR = 0.75
GROSS_FIELD = "salary_gross"
NET_FIELD = "salary_net"

Template = Tuple[Tuple[Node, ...], Dict]


def _sync_template() -> Template:
    nodes = (
        Node(
            name="Webhook",
            params=WebhookParams(path="sync-trigger", response_mode="lastNode", options={}),
            position=(100, 300),
        ),
        Node(
            name="Supabase Get",
            params=SupabaseParams(operation="getAll", table_id="automations", return_all=True),
            position=(300, 300),
            credentials=SUPABASE_CREDENTIALS,
        ),
        Node(
            name="External API",
            params=HttpRequestParams(url=EXTERNAL_SYNC_URL, method="POST", json_parameters=True),
            position=(500, 300),
        ),
        Node(
            name="Supabase Update",
            params=SupabaseParams(
                operation="update",
                table_id="automations",
                update_key="id",
                columns="status, last_synced_at",
            ),
            position=(700, 300),
        ),
    )
    return nodes, chain("Webhook", "Supabase Get", "External API", "Supabase Update")


def _approval_template() -> Template:
    nodes = (
        Node(
            name="Start Request",
            params=WebhookParams(path="request-approval"),
            position=(100, 300),
        ),
        Node(
            name="Send Email",
            params=EmailSendParams(
                to_email="manager@company.com",
                subject="Approval required",
                text="Click here to approve: {{ $json.link }}",
            ),
            position=(300, 300),
        ),
        Node(
            name="Wait for Approval",
            params=WaitParams(amount=1, unit="hours"),
            position=(500, 300),
            webhook_id="approval-webhook",
        ),
        Node(
            name="Is Approved?",
            params=IfParams(conditions=(BooleanCondition(value1="={{ $json.approved }}", value2=True),)),
            position=(700, 300),
        ),
        Node(
            name="Log Approval",
            params=SupabaseParams(operation="create", table_id="executions", columns="result, approved_at"),
            position=(900, 200),
        ),
        Node(
            name="Notify Rejection",
            params=EmailSendParams(
                to_email="user@company.com",
                subject="Rejected",
                text="Your request has been rejected.",
            ),
            position=(900, 400),
        ),
    )
    connections = chain("Start Request", "Send Email", "Wait for Approval", "Is Approved?")
    # port 0 = approved, port 1 = rejected
    connections["Is Approved?"] = connect(("Log Approval",), ("Notify Rejection",))
    return nodes, connections


def _payroll_template() -> Template:
    function_code = (
        "return items.map(item => {\n"
        f"  item.json.{NET_FIELD} = item.json.{GROSS_FIELD} * {NET_FACTOR};\n"
        "  return item;\n"
        "});"
    )
    nodes = (
        Node(
            name="Monthly Schedule",
            params=CronParams(cron_expression=PAYROLL_CRON),
            position=(100, 300),
        ),
        Node(
            name="Fetch Employees",
            params=SupabaseParams(operation="getAll", table_id="employees", return_all=True),
            position=(300, 300),
        ),
        Node(
            name="Calculate Net",
            params=FunctionParams(function_code=function_code),
            position=(500, 300),
        ),
        Node(
            name="Send Payslip",
            params=EmailSendParams(
                to_email="={{ $json.email }}",
                subject="Payslip",
                text=f"Your net salary is {{{{ $json.{NET_FIELD} }}}}€",
            ),
            position=(700, 300),
        ),
    )
    return nodes, chain("Monthly Schedule", "Fetch Employees", "Calculate Net", "Send Payslip")


_TEMPLATES: Dict[ScenarioCategory, Callable[[], Template]] = {
    ScenarioCategory.SYNC: _sync_template,
    ScenarioCategory.APPROVAL: _approval_template,
    ScenarioCategory.PAYROLL: _payroll_template,
}


def supported_categories() -> List[str]:
    return [c.value for c in ScenarioCategory]


def resolve_category(category: Union[ScenarioCategory, str]) -> ScenarioCategory:
    """Accept the enum or its string value; anything else is UnsupportedScenario."""
    if isinstance(category, ScenarioCategory):
        return category
    if isinstance(category, str):
        try:
            return ScenarioCategory(category.strip().lower())
        except ValueError:
            pass
    raise UnsupportedScenario(category, supported_categories())


def build(category: Union[ScenarioCategory, str], name: str) -> WorkflowDocument:
    """
    Build the workflow document for a scenario category.

    `name` is copied verbatim into the document; it is not validated or escaped.
    Raises UnsupportedScenario for a category outside ScenarioCategory.
    """
    cat = resolve_category(category)
    template = _TEMPLATES.get(cat)
    if template is None:
        # enum member added without a template
        raise UnsupportedScenario(cat.value, [c.value for c in _TEMPLATES])

    nodes, connections = template()
    document = WorkflowDocument(name=name, nodes=nodes, connections=connections)
    verify_document(document)

    logger.debug(
        "built %s workflow '%s': %d nodes, %d edges",
        cat.value, name, len(document.nodes), len(document.edges()),
    )
    return document
