# flowsmith/snippets/library.py
"""
Static backend snippets shown next to generated workflows.

These are display text only: nothing in flowsmith imports, runs or checks them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from flowsmith.errors import UnknownSnippet


@dataclass(frozen=True)
class Snippet:
    key: str
    title: str
    filename: str
    description: str
    language: str
    code: str


WEBHOOK_HANDLER = '''\
# api/webhook_handler.py
import os
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from supabase import create_client

SUPABASE_URL = os.environ["SUPABASE_URL"]
SUPABASE_SERVICE_KEY = os.environ["SUPABASE_SERVICE_KEY"]
N8N_WEBHOOK_BASE = os.environ["N8N_WEBHOOK_BASE"]  # e.g. https://n8n.example.com/webhook

# Service-role client: full access, keep it server side
supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
app = FastAPI()


class TriggerRequest(BaseModel):
    automation_id: str | None = None
    payload: dict = {}


def _log_execution(automation_id, status, result, external_id=None):
    supabase.table("executions").insert({
        "automation_id": automation_id,
        "status": status,
        "external_execution_id": external_id,
        "result": result,
        "triggered_at": datetime.now(timezone.utc).isoformat(),
    }).execute()


@app.post("/api/webhook-handler")
def webhook_handler(req: TriggerRequest):
    if not req.automation_id:
        raise HTTPException(status_code=400, detail="Missing automation_id")

    rows = (
        supabase.table("automations")
        .select("n8n_webhook_slug, status")
        .eq("id", req.automation_id)
        .limit(1)
        .execute()
        .data
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Automation not found")
    automation = rows[0]
    if automation["status"] != "active":
        raise HTTPException(status_code=403, detail="Automation is not active")

    url = f"{N8N_WEBHOOK_BASE}/{automation['n8n_webhook_slug']}"
    try:
        resp = httpx.post(url, json=req.payload, timeout=5.0)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        _log_execution(req.automation_id, "error", {"error": str(e)})
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {e}")

    data = resp.json() if resp.content else {}
    try:
        _log_execution(req.automation_id, "success", data, data.get("executionId", "unknown"))
    except Exception as e:  # n8n already ran; do not fail the request
        print(f"Failed to log execution: {e}")
    return {"success": True, "n8n_status": resp.status_code}
'''

SUPABASE_SETUP = '''\
-- scripts/supabase_setup.sql
-- Run in the Supabase SQL editor.

-- 1. Automations
CREATE TABLE IF NOT EXISTS public.automations (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  name TEXT NOT NULL,
  n8n_webhook_slug TEXT UNIQUE NOT NULL,
  type TEXT CHECK (type IN ('sync', 'approval', 'payroll')) NOT NULL,
  status TEXT CHECK (status IN ('active', 'inactive', 'draft')) DEFAULT 'draft',
  created_by UUID REFERENCES auth.users(id),
  created_at TIMESTAMPTZ DEFAULT NOW(),
  metadata JSONB DEFAULT '{}'::jsonb
);

-- 2. Executions
CREATE TABLE IF NOT EXISTS public.executions (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  automation_id UUID REFERENCES public.automations(id) ON DELETE CASCADE,
  external_execution_id TEXT,
  status TEXT CHECK (status IN ('success', 'error', 'pending')),
  result JSONB,
  triggered_at TIMESTAMPTZ DEFAULT NOW()
);

-- 3. Row level security
ALTER TABLE public.automations ENABLE ROW LEVEL SECURITY;
ALTER TABLE public.executions ENABLE ROW LEVEL SECURITY;

CREATE POLICY "Users view own automations" ON public.automations
  FOR SELECT USING (auth.uid() = created_by);

CREATE POLICY "Users insert own automations" ON public.automations
  FOR INSERT WITH CHECK (auth.uid() = created_by);

CREATE POLICY "Users view own executions" ON public.executions
  FOR SELECT USING (
    EXISTS (
      SELECT 1 FROM public.automations
      WHERE automations.id = executions.automation_id
      AND automations.created_by = auth.uid()
    )
  );

-- 4. Default templates (system rows, no owner)
INSERT INTO public.automations (name, type, n8n_webhook_slug, status) VALUES
  ('LDAP sync', 'sync', 'sync-ldap-v1', 'draft'),
  ('Leave approval', 'approval', 'approval-leaves-v1', 'draft'),
  ('Monthly payslips', 'payroll', 'payroll-monthly-v1', 'draft')
ON CONFLICT (n8n_webhook_slug) DO NOTHING;
'''

API_WRAPPER = '''\
# api/workflows.py
import os

from fastapi import FastAPI, Header, HTTPException, Request
from pydantic import BaseModel
from supabase import create_client

from flowsmith.integration.ratelimit import SlidingWindowLimiter

supabase = create_client(os.environ["SUPABASE_URL"], os.environ["SUPABASE_SERVICE_KEY"])
app = FastAPI()

# One limiter per process; swap for a shared store (e.g. Redis) when scaling out
limiter = SlidingWindowLimiter(max_requests=10, window_sec=60.0)


class NewAutomation(BaseModel):
    name: str
    type: str
    n8n_webhook_slug: str


def _check_rate(request: Request):
    client = request.headers.get("x-forwarded-for") or "unknown"
    if not limiter.allow(client):
        raise HTTPException(status_code=429, detail="Too many requests")


@app.get("/api/workflows")
def list_workflows(request: Request, x_user_id: str | None = Header(default=None)):
    _check_rate(request)
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return supabase.table("automations").select("*").eq("created_by", x_user_id).execute().data


@app.post("/api/workflows", status_code=201)
def create_workflow(body: NewAutomation, request: Request, x_user_id: str | None = Header(default=None)):
    _check_rate(request)
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    row = {**body.model_dump(), "created_by": x_user_id, "status": "active"}
    return supabase.table("automations").insert(row).execute().data[0]
'''


_SNIPPETS: Dict[str, Snippet] = {
    s.key: s
    for s in (
        Snippet(
            key="webhook",
            title="Webhook Handler",
            filename="api/webhook_handler.py",
            description=(
                "Receives trigger events (database webhooks or frontend), checks the automation "
                "is active, forwards the payload to n8n and logs the execution."
            ),
            language="python",
            code=WEBHOOK_HANDLER,
        ),
        Snippet(
            key="supabase",
            title="Supabase Setup",
            filename="scripts/supabase_setup.sql",
            description=(
                "Creates the automations and executions tables with row level security "
                "policies, then seeds one draft automation per scenario."
            ),
            language="sql",
            code=SUPABASE_SETUP,
        ),
        Snippet(
            key="api",
            title="API Routes & Rate Limiting",
            filename="api/workflows.py",
            description="Lists and creates a user's automations behind a per-client rate limit.",
            language="python",
            code=API_WRAPPER,
        ),
    )
}


def list_snippets() -> List[Snippet]:
    return list(_SNIPPETS.values())


def get_snippet(key: str) -> Snippet:
    try:
        return _SNIPPETS[key]
    except KeyError:
        raise UnknownSnippet(key, _SNIPPETS.keys()) from None
