# flowsmith/integration/receiver.py
"""
Trigger receiver: the backend endpoint that generated Webhook nodes are fed by.

    POST {automation_id, payload}
      -> look up the automation record
      -> reject if missing (400), unknown (404), inactive (403), rate limited (429)
      -> forward payload to <webhook_base>/<n8n_webhook_slug>
      -> record the execution (success / error)

Storage and HTTP are injected so the flow can run against fakes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx

from flowsmith.integration.ratelimit import SlidingWindowLimiter
from flowsmith.utils.config import Settings
from flowsmith.utils.logger import get_logger

logger = get_logger("receiver")


@dataclass(frozen=True)
class AutomationRecord:
    id: str
    name: str
    n8n_webhook_slug: str
    type: str
    status: str = "draft"   # active | inactive | draft


@dataclass(frozen=True)
class ExecutionRecord:
    automation_id: str
    status: str             # success | error | pending
    result: Any = None
    external_execution_id: Optional[str] = None
    triggered_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass(frozen=True)
class ForwardResult:
    status_code: int
    data: Dict[str, Any]


@dataclass(frozen=True)
class ReceiverResponse:
    status_code: int
    body: Dict[str, Any]


class AutomationStore(Protocol):
    def get_automation(self, automation_id: str) -> Optional[AutomationRecord]: ...

    def record_execution(self, record: ExecutionRecord) -> None: ...


Forwarder = Callable[[str, Dict[str, Any]], ForwardResult]


class InMemoryAutomationStore:
    def __init__(self, automations: Optional[List[AutomationRecord]] = None):
        self.automations: Dict[str, AutomationRecord] = {a.id: a for a in (automations or [])}
        self.executions: List[ExecutionRecord] = []

    def add(self, automation: AutomationRecord) -> None:
        self.automations[automation.id] = automation

    def get_automation(self, automation_id: str) -> Optional[AutomationRecord]:
        return self.automations.get(automation_id)

    def record_execution(self, record: ExecutionRecord) -> None:
        self.executions.append(record)


class HttpxForwarder:
    """POST the payload as JSON and return the engine's status and JSON body."""

    def __init__(self, timeout_sec: float = 5.0, client: Optional[httpx.Client] = None):
        self.timeout_sec = timeout_sec
        self._client = client

    def __call__(self, url: str, payload: Dict[str, Any]) -> ForwardResult:
        headers = {"Content-Type": "application/json"}
        if self._client is not None:
            resp = self._client.post(url, json=payload, headers=headers, timeout=self.timeout_sec)
        else:
            resp = httpx.post(url, json=payload, headers=headers, timeout=self.timeout_sec)
        resp.raise_for_status()
        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            data = {"raw": resp.text}
        if not isinstance(data, dict):
            data = {"data": data}
        return ForwardResult(status_code=resp.status_code, data=data)


class TriggerReceiver:
    def __init__(
        self,
        store: AutomationStore,
        webhook_base: str,
        forward: Optional[Forwarder] = None,
        limiter: Optional[SlidingWindowLimiter] = None,
    ):
        if not webhook_base:
            raise ValueError("webhook_base is required (N8N_WEBHOOK_BASE)")
        self.store = store
        self.webhook_base = webhook_base.rstrip("/")
        self.forward = forward or HttpxForwarder()
        self.limiter = limiter

    @classmethod
    def from_settings(cls, store: AutomationStore, settings: Optional[Settings] = None) -> "TriggerReceiver":
        settings = settings or Settings.from_env()
        return cls(
            store=store,
            webhook_base=settings.n8n_webhook_base or "",
            forward=HttpxForwarder(timeout_sec=settings.forward_timeout_sec),
            limiter=SlidingWindowLimiter(settings.rate_limit, settings.rate_window_sec),
        )

    def url_for(self, automation: AutomationRecord) -> str:
        return f"{self.webhook_base}/{automation.n8n_webhook_slug}"

    def handle(
        self,
        automation_id: Optional[str],
        payload: Optional[Dict[str, Any]] = None,
        client_id: str = "unknown",
    ) -> ReceiverResponse:
        if self.limiter is not None and not self.limiter.allow(client_id):
            logger.warning("rate limited client=%s", client_id)
            return ReceiverResponse(429, {"error": "Too many requests"})

        if not automation_id:
            return ReceiverResponse(400, {"error": "Missing automation_id"})

        try:
            automation = self.store.get_automation(automation_id)
            if automation is None:
                logger.error("automation not found: %s", automation_id)
                return ReceiverResponse(404, {"error": "Automation not found"})
            if automation.status != "active":
                return ReceiverResponse(403, {"error": "Automation is not active"})

            url = self.url_for(automation)
            logger.info("triggering n8n: %s", url)
            result = self.forward(url, payload or {})
        except Exception as e:
            logger.error("trigger for %s failed: %s", automation_id, e)
            self._record_error(automation_id, e)
            return ReceiverResponse(500, {"error": "Internal Server Error", "details": str(e)})

        try:
            self.store.record_execution(
                ExecutionRecord(
                    automation_id=automation_id,
                    status="success",
                    result=result.data,
                    external_execution_id=str(result.data.get("executionId") or "unknown"),
                )
            )
        except Exception as e:
            # the engine already ran; report success regardless
            logger.warning("failed to log execution for %s: %s", automation_id, e)

        return ReceiverResponse(200, {"success": True, "n8n_status": result.status_code})

    def _record_error(self, automation_id: str, error: Exception) -> None:
        try:
            self.store.record_execution(
                ExecutionRecord(automation_id=automation_id, status="error", result={"error": str(error)})
            )
        except Exception as e:
            logger.error("failed to log error execution for %s: %s", automation_id, e)
