"""Demo: walk the consent flow (approve, deny, failures) using FastAPI TestClient.

The authorization server is faked with httpx.MockTransport, so nothing
needs to be running.

Run with:
    python scripts/demo_consent_flow.py
"""

from __future__ import annotations

import sys
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import httpx
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from oauth_consent.api.dependencies import get_auth_server  # noqa: E402
from oauth_consent.main import app  # noqa: E402
from oauth_consent.services.auth_server import AuthServerClient  # noqa: E402

REDIRECT_URI = "http://localhost:3000/callback"
PARAMS = {
    "client_id": "demo-client",
    "scope": "conversion",
    "state": "demo-state",
    "redirect_uri": REDIRECT_URI,
    "response_type": "code",
    "code_challenge": "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
    "code_challenge_method": "S256",
}

authorize_fails = False


def fake_auth_server(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/oauth/scopes":
        return httpx.Response(
            200,
            json={
                "data": {
                    "client_id": request.url.params["client_id"],
                    "name": "Demo App",
                    "display_description": "A demo client",
                    "scope_description": ["Read your conversion data"],
                }
            },
        )
    if request.url.path == "/oauth/authorize":
        if authorize_fails:
            return httpx.Response(500, json={"error_description": "Database unavailable"})
        return httpx.Response(200, json={"code": "demo-code-123", "state": "demo-state"})
    return httpx.Response(404)


def open_consent(client: TestClient, params: dict[str, str]) -> str:
    r = client.get("/oauth/authorize", params=params)
    return r.text.split('action="/oauth/consent/')[1].split('"')[0]


def main() -> None:
    global authorize_fails

    server = AuthServerClient(
        "http://auth.local",
        "demo-credential",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake_auth_server)),
    )
    app.dependency_overrides[get_auth_server] = lambda: server
    client = TestClient(app, follow_redirects=False)

    # ── Step 1: invalid request ─────────────────────────────────────
    r = client.get("/oauth/authorize", params={**PARAMS, "response_type": "token"})
    print(f"1. GET  /oauth/authorize (response_type=token) → {r.status_code}  (error page)")

    # ── Step 2: consent page ────────────────────────────────────────
    consent_id = open_consent(client, PARAMS)
    print(f"2. GET  /oauth/authorize  → 200  consent_id={consent_id[:12]}…")

    # ── Step 3: approve ─────────────────────────────────────────────
    r = client.post(f"/oauth/consent/{consent_id}", data={"decision": "approve"})
    query = parse_qs(urlsplit(r.headers["location"]).query)
    print(f"3. POST approve           → {r.status_code}  code={query['code'][0]}  state={query['state'][0]}")

    # ── Step 4: replay the decision ─────────────────────────────────
    r = client.post(f"/oauth/consent/{consent_id}", data={"decision": "approve"})
    print(f"4. POST approve (replay)  → {r.status_code}  (session gone)")

    # ── Step 5: deny ────────────────────────────────────────────────
    consent_id = open_consent(client, PARAMS)
    r = client.post(f"/oauth/consent/{consent_id}", data={"decision": "deny"})
    print(f"5. POST deny              → {r.status_code}  Location: {r.headers['location']}")

    # ── Step 6: authorization server fails ──────────────────────────
    authorize_fails = True
    consent_id = open_consent(client, PARAMS)
    r = client.post(f"/oauth/consent/{consent_id}", data={"decision": "approve"})
    print(f"6. POST approve (500 upstream) → {r.status_code}  Location: {r.headers['location']}")

    app.dependency_overrides.pop(get_auth_server, None)
    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
