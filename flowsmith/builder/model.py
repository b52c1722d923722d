# flowsmith/builder/model.py
"""
Value types for generated n8n workflow documents.

Node configuration is a tagged union: each node type of the catalog has its own
parameter dataclass, and the variant decides the node's `type` and `typeVersion`.
Everything here is frozen; `to_dict()` produces the engine's wire shape:

    { "name": ..., "nodes": [...], "connections": {src: {"main": [[edge, ...], ...]}},
      "meta": {"instanceId": ...} }
"""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

MAIN = "main"
GENERATOR_INSTANCE_ID = "GeneratedByIntegrator"


# ---------- Parameter variants (one per catalog node type) ----------

@dataclass(frozen=True)
class WebhookParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.webhook"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = True

    path: str
    response_mode: Optional[str] = None
    options: Optional[Mapping[str, Any]] = None

    def to_parameters(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"path": self.path}
        if self.response_mode is not None:
            params["responseMode"] = self.response_mode
        if self.options is not None:
            params["options"] = dict(self.options)
        return params


@dataclass(frozen=True)
class SupabaseParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.supabase"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = False

    operation: str
    table_id: str
    return_all: Optional[bool] = None
    update_key: Optional[str] = None
    columns: Optional[str] = None

    def to_parameters(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"operation": self.operation, "tableId": self.table_id}
        if self.return_all is not None:
            params["returnAll"] = self.return_all
        if self.update_key is not None:
            params["updateKey"] = self.update_key
        if self.columns is not None:
            params["columns"] = self.columns
        return params


@dataclass(frozen=True)
class HttpRequestParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.httpRequest"
    TYPE_VERSION: ClassVar[int] = 3
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = False

    url: str
    method: str = "GET"
    json_parameters: bool = True
    options: Mapping[str, Any] = field(default_factory=dict)

    def to_parameters(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "jsonParameters": self.json_parameters,
            "options": dict(self.options),
        }


@dataclass(frozen=True)
class EmailSendParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.emailSend"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = False

    to_email: str
    subject: str
    text: str

    def to_parameters(self) -> Dict[str, Any]:
        return {"toEmail": self.to_email, "subject": self.subject, "text": self.text}


@dataclass(frozen=True)
class WaitParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.wait"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = False

    amount: int
    unit: str

    def to_parameters(self) -> Dict[str, Any]:
        return {"amount": self.amount, "unit": self.unit}


@dataclass(frozen=True)
class BooleanCondition:
    value1: str
    value2: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"value1": self.value1, "value2": self.value2}


@dataclass(frozen=True)
class IfParams:
    """Binary conditional: output port 0 is the true branch, port 1 the false branch."""

    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.if"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 2
    IS_TRIGGER: ClassVar[bool] = False

    conditions: Tuple[BooleanCondition, ...]

    def to_parameters(self) -> Dict[str, Any]:
        return {"conditions": {"boolean": [c.to_dict() for c in self.conditions]}}


@dataclass(frozen=True)
class CronParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.cron"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = True

    cron_expression: str
    mode: str = "custom"

    def to_parameters(self) -> Dict[str, Any]:
        return {
            "triggerTimes": {
                "item": [{"mode": self.mode, "cronExpression": self.cron_expression}]
            }
        }


@dataclass(frozen=True)
class FunctionParams:
    NODE_TYPE: ClassVar[str] = "n8n-nodes-base.function"
    TYPE_VERSION: ClassVar[int] = 1
    OUTPUT_PORTS: ClassVar[int] = 1
    IS_TRIGGER: ClassVar[bool] = False

    function_code: str

    def to_parameters(self) -> Dict[str, Any]:
        return {"functionCode": self.function_code}


NodeParams = Union[
    WebhookParams,
    SupabaseParams,
    HttpRequestParams,
    EmailSendParams,
    WaitParams,
    IfParams,
    CronParams,
    FunctionParams,
]

# ---------- Graph pieces ----------

@dataclass(frozen=True)
class Edge:
    node: str
    type: str = MAIN
    index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"node": self.node, "type": self.type, "index": self.index}


@dataclass(frozen=True)
class Node:
    name: str
    params: NodeParams
    position: Tuple[int, int]
    credentials: Optional[Mapping[str, Any]] = None
    webhook_id: Optional[str] = None

    @property
    def type(self) -> str:
        return self.params.NODE_TYPE

    @property
    def type_version(self) -> int:
        return self.params.TYPE_VERSION

    @property
    def output_ports(self) -> int:
        return self.params.OUTPUT_PORTS

    @property
    def is_trigger(self) -> bool:
        return self.params.IS_TRIGGER

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "parameters": self.params.to_parameters(),
            "name": self.name,
            "type": self.type,
            "typeVersion": self.type_version,
            "position": [int(self.position[0]), int(self.position[1])],
        }
        if self.credentials is not None:
            out["credentials"] = copy.deepcopy(dict(self.credentials))
        if self.webhook_id is not None:
            out["webhookId"] = self.webhook_id
        return out


# source node name -> connection kind -> output ports -> edges
Connections = Mapping[str, Mapping[str, Tuple[Tuple[Edge, ...], ...]]]


@dataclass(frozen=True)
class WorkflowDocument:
    name: str
    nodes: Tuple[Node, ...]
    connections: Connections
    meta: Mapping[str, str] = field(
        default_factory=lambda: {"instanceId": GENERATOR_INSTANCE_ID}
    )

    def node(self, name: str) -> Node:
        for n in self.nodes:
            if n.name == name:
                return n
        raise KeyError(name)

    def node_names(self) -> List[str]:
        return [n.name for n in self.nodes]

    def ports(self, source: str, kind: str = MAIN) -> Tuple[Tuple[Edge, ...], ...]:
        """Output ports of `source` for a connection kind (empty if it has none)."""
        return tuple(self.connections.get(source, {}).get(kind, ()))

    def edges(self) -> List[Tuple[str, int, Edge]]:
        """Flatten connections into (source, output_port, edge) triples, in document order."""
        out: List[Tuple[str, int, Edge]] = []
        for src, kinds in self.connections.items():
            for _kind, ports in kinds.items():
                for port_idx, port in enumerate(ports):
                    for e in port:
                        out.append((src, port_idx, e))
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": {
                src: {
                    kind: [[e.to_dict() for e in port] for port in ports]
                    for kind, ports in kinds.items()
                }
                for src, kinds in self.connections.items()
            },
            "meta": dict(self.meta),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


def connect(*ports: Tuple[str, ...], kind: str = MAIN) -> Dict[str, Tuple[Tuple[Edge, ...], ...]]:
    """
    Build the per-source connection entry from port target lists.
        connect(("A",))            -> {"main": [[A]]}
        connect(("A",), ("B",))    -> {"main": [[A], [B]]}
    """
    return {kind: tuple(tuple(Edge(node=t, type=kind) for t in port) for port in ports)}


def chain(*names: str) -> Dict[str, Dict[str, Tuple[Tuple[Edge, ...], ...]]]:
    """Linear single-port connections: names[0] -> names[1] -> ... -> names[-1]."""
    return {src: connect((dst,)) for src, dst in zip(names, names[1:])}
