# tests/test_receiver.py

import httpx
import pytest

from flowsmith.integration.ratelimit import SlidingWindowLimiter
from flowsmith.integration.receiver import (
    AutomationRecord,
    ForwardResult,
    HttpxForwarder,
    InMemoryAutomationStore,
    TriggerReceiver,
)
from flowsmith.utils.config import Settings

BASE = "https://n8n.example.com/webhook/"


class RecordingForwarder:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result or ForwardResult(200, {"executionId": "exec-42"})
        self.error = error

    def __call__(self, url, payload):
        self.calls.append((url, payload))
        if self.error is not None:
            raise self.error
        return self.result


class BrokenLogStore(InMemoryAutomationStore):
    def record_execution(self, record):
        raise RuntimeError("executions table unavailable")


@pytest.fixture
def store():
    return InMemoryAutomationStore([
        AutomationRecord(id="a1", name="LDAP sync", n8n_webhook_slug="sync-ldap-v1", type="sync", status="active"),
        AutomationRecord(id="a2", name="Leave approval", n8n_webhook_slug="approval-leaves-v1", type="approval"),
    ])


def test_forwards_active_automation(store):
    fwd = RecordingForwarder()
    receiver = TriggerReceiver(store, BASE, forward=fwd)

    resp = receiver.handle("a1", {"user": 7})

    assert resp.status_code == 200
    assert resp.body == {"success": True, "n8n_status": 200}
    assert fwd.calls == [("https://n8n.example.com/webhook/sync-ldap-v1", {"user": 7})]
    [rec] = store.executions
    assert rec.status == "success"
    assert rec.external_execution_id == "exec-42"
    assert rec.result == {"executionId": "exec-42"}


def test_missing_execution_id_is_unknown(store):
    receiver = TriggerReceiver(store, BASE, forward=RecordingForwarder(ForwardResult(200, {})))
    receiver.handle("a1", None)
    assert store.executions[0].external_execution_id == "unknown"


@pytest.mark.parametrize(
    "automation_id, status, error",
    [
        (None, 400, "Missing automation_id"),
        ("", 400, "Missing automation_id"),
        ("zzz", 404, "Automation not found"),
        ("a2", 403, "Automation is not active"),
    ],
)
def test_rejections_do_not_forward(store, automation_id, status, error):
    fwd = RecordingForwarder()
    resp = TriggerReceiver(store, BASE, forward=fwd).handle(automation_id, {})
    assert resp.status_code == status
    assert resp.body == {"error": error}
    assert fwd.calls == []
    assert store.executions == []


def test_forward_failure_is_logged_as_error(store):
    fwd = RecordingForwarder(error=httpx.ConnectError("connection refused"))
    resp = TriggerReceiver(store, BASE, forward=fwd).handle("a1", {})

    assert resp.status_code == 500
    assert resp.body["error"] == "Internal Server Error"
    assert "connection refused" in resp.body["details"]
    [rec] = store.executions
    assert rec.status == "error"
    assert rec.result == {"error": "connection refused"}


def test_log_failure_does_not_fail_request():
    store = BrokenLogStore([
        AutomationRecord(id="a1", name="x", n8n_webhook_slug="slug", type="sync", status="active"),
    ])
    resp = TriggerReceiver(store, BASE, forward=RecordingForwarder()).handle("a1", {})
    assert resp.status_code == 200


def test_rate_limited_client(store):
    limiter = SlidingWindowLimiter(max_requests=1, window_sec=60.0, clock=lambda: 0.0)
    receiver = TriggerReceiver(store, BASE, forward=RecordingForwarder(), limiter=limiter)

    assert receiver.handle("a1", {}, client_id="10.0.0.1").status_code == 200
    assert receiver.handle("a1", {}, client_id="10.0.0.1").status_code == 429
    assert receiver.handle("a1", {}, client_id="10.0.0.2").status_code == 200


def test_requires_webhook_base(store):
    with pytest.raises(ValueError):
        TriggerReceiver(store, "")
    with pytest.raises(ValueError):
        TriggerReceiver.from_settings(store, Settings())


def test_from_settings(store):
    settings = Settings.from_env({
        "N8N_WEBHOOK_BASE": "https://engine.local/webhook/",
        "FLOWSMITH_RATE_LIMIT": "2",
        "FLOWSMITH_RATE_WINDOW_SEC": "30",
    })
    receiver = TriggerReceiver.from_settings(store, settings)
    assert receiver.url_for(store.get_automation("a1")) == "https://engine.local/webhook/sync-ldap-v1"
    assert receiver.limiter.max_requests == 2
    assert receiver.limiter.window_sec == 30.0


def test_settings_reject_garbage():
    with pytest.raises(ValueError):
        Settings.from_env({"FLOWSMITH_RATE_LIMIT": "ten"})
    assert Settings.from_env({}) == Settings()


def test_httpx_forwarder_with_mock_transport():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"executionId": "e1"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    result = HttpxForwarder(client=client)("https://engine.local/webhook/x", {"a": 1})

    assert result == ForwardResult(200, {"executionId": "e1"})
    assert seen["url"] == "https://engine.local/webhook/x"
    assert b'"a"' in seen["body"]


def test_httpx_forwarder_raises_on_engine_error(store):
    client = httpx.Client(transport=httpx.MockTransport(lambda req: httpx.Response(503)))
    receiver = TriggerReceiver(store, BASE, forward=HttpxForwarder(client=client))

    resp = receiver.handle("a1", {})
    assert resp.status_code == 500
    assert store.executions[0].status == "error"


class FailingLookupStore(InMemoryAutomationStore):
    def get_automation(self, automation_id):
        raise RuntimeError("automations table unavailable")


def test_store_lookup_failure_returns_500():
    store = FailingLookupStore()
    fwd = RecordingForwarder()
    resp = TriggerReceiver(store, BASE, forward=fwd).handle("a1", {})

    assert resp.status_code == 500
    assert "automations table unavailable" in resp.body["details"]
    assert fwd.calls == []
    [rec] = store.executions
    assert rec.status == "error"


@pytest.mark.parametrize("error", [TimeoutError("engine timed out"), OSError("network unreachable")])
def test_non_httpx_forward_failure_returns_500(store, error):
    resp = TriggerReceiver(store, BASE, forward=RecordingForwarder(error=error)).handle("a1", {})

    assert resp.status_code == 500
    assert str(error) in resp.body["details"]
    [rec] = store.executions
    assert rec.status == "error"
    assert rec.result == {"error": str(error)}


def test_error_log_failure_keeps_500():
    store = BrokenLogStore([
        AutomationRecord(id="a1", name="x", n8n_webhook_slug="slug", type="sync", status="active"),
    ])
    fwd = RecordingForwarder(error=httpx.ConnectError("connection refused"))
    resp = TriggerReceiver(store, BASE, forward=fwd).handle("a1", {})

    assert resp.status_code == 500
    assert resp.body == {"error": "Internal Server Error", "details": "connection refused"}
