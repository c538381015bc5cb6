"""HTML projection of the consent state.

Every page is a pure function of a ConsentState (plus the consent id the
form posts back to).  No page reads anything else, so what the user sees
can never disagree with what the controller will do.

Inline HTML, same as the rest of the service: one card, no template
engine, no static files.  Every dynamic value goes through html.escape.
"""

from __future__ import annotations

import html

from fastapi import status
from fastapi.responses import HTMLResponse

from oauth_consent.services.consent_controller import (
    Authorizing,
    ConsentState,
    Failed,
    Ready,
)

_PAGE_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="referrer" content="no-referrer">
  <title>{title}</title>
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: system-ui, -apple-system, sans-serif;
      display: flex; justify-content: center; align-items: center;
      min-height: 100vh; background: #f5f5f5; padding: 1rem;
    }}
    .card {{
      background: #fff; padding: 2rem; border-radius: 12px;
      box-shadow: 0 2px 8px rgba(0,0,0,.1); width: 100%; max-width: 420px;
    }}
    h1, h2 {{ text-align: center; margin-bottom: .5rem; }}
    .muted {{ color: #555; font-size: .9rem; text-align: center; }}
    .panel {{ background: #f7f7f8; border-radius: 8px; padding: 1rem; margin: 1rem 0; }}
    .logo {{ width: 48px; height: 48px; border-radius: 8px; float: left;
      margin-right: .75rem; background: #3b5bdb; color: #fff;
      font-weight: 600; font-size: 1.2rem; text-align: center; line-height: 48px; }}
    ul {{ list-style: none; }}
    li {{ margin: .5rem 0; }}
    .scope-name {{ font-weight: 600; font-size: .9rem; }}
    .scope-desc {{ color: #555; font-size: .8rem; }}
    .redirect {{ word-break: break-all; font-size: .8rem; color: #1c4ed8; }}
    button {{
      width: 100%; padding: .7rem; border: none; border-radius: 8px;
      font-size: .95rem; cursor: pointer; margin-top: .5rem;
    }}
    .approve {{ background: #111; color: #fff; }}
    .deny {{ background: #eee; color: #333; }}
    .error {{ color: #c00; font-size: .9rem; margin: .35rem 0; text-align: center; }}
  </style>
</head>
<body>
  <div class="card" data-testid="{testid}">
    {body}
  </div>
</body>
</html>
"""


# Sent with every page: no framing by other sites, no caching.
_PAGE_HEADERS = {
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": "frame-ancestors 'none'",
    "X-Content-Type-Options": "nosniff",
    "Cache-Control": "no-store",
}


def _page(title: str, testid: str, body: str, status_code: int = 200) -> HTMLResponse:
    page = _PAGE_HTML.format(title=html.escape(title), testid=testid, body=body)
    return HTMLResponse(page, status_code=status_code, headers=_PAGE_HEADERS)


def _error_page(messages: tuple[str, ...], status_code: int) -> HTMLResponse:
    items = "\n".join(f'<p class="error">{html.escape(m)}</p>' for m in messages)
    body = (
        "<h2>Authorization Error</h2>"
        f'<div role="alert" aria-live="polite">{items}</div>'
    )
    return _page("Authorization Error", "error-screen", body, status_code)


def _logo(name: str, logo: str | None) -> str:
    if logo:
        return (
            f'<img class="logo" src="{html.escape(logo, quote=True)}" '
            f'alt="{html.escape(name, quote=True)} logo">'
        )
    initial = html.escape(name[:1].upper())
    return f'<div class="logo" aria-label="{html.escape(name, quote=True)} logo">{initial}</div>'


def render_consent(state: Ready | Authorizing, consent_id: str) -> HTMLResponse:
    client = state.client
    request = state.request
    disabled = " disabled" if isinstance(state, Authorizing) else ""

    scopes = "\n".join(
        f'<li><div class="scope-name">{html.escape(s.name)}</div>'
        f'<div class="scope-desc">{html.escape(s.description)}</div></li>'
        for s in client.scopes
    )
    returning = (
        '<p class="muted">You have authorized this application before.</p>'
        if client.previously_consented
        else ""
    )
    action = f"/oauth/consent/{html.escape(consent_id, quote=True)}"
    approve_label = "Authorizing..." if disabled else "Authorize Application"

    body = f"""
    <h1>Authorize Application</h1>
    <p class="muted">Grant access to your account</p>
    <div class="panel" data-testid="app-info">
      {_logo(client.name, client.logo)}
      <div class="app-name"><strong>{html.escape(client.name)}</strong></div>
      <div class="scope-desc">{html.escape(client.description)}</div>
      <div style="clear: both"></div>
    </div>
    {returning}
    <div data-testid="permissions-section">
      <h3>Permissions Requested</h3>
      <ul role="list">{scopes}</ul>
    </div>
    <div class="panel" data-testid="redirect-info">
      <p>You'll be redirected to:</p>
      <p class="redirect" title="{html.escape(request.redirect_uri, quote=True)}">{html.escape(request.redirect_uri)}</p>
    </div>
    <form method="post" action="{action}" data-testid="action-buttons">
      <button class="approve" type="submit" name="decision" value="approve"
        data-testid="authorize-button"{disabled}>{approve_label}</button>
      <button class="deny" type="submit" name="decision" value="deny"
        data-testid="cancel-button"{disabled}>Cancel</button>
    </form>
    <p class="muted" style="margin-top: 1rem">
      Only authorize applications you trust. You can revoke access at any time
      in your account settings.
    </p>
    """
    return _page("Authorize Application", "consent-screen", body)


def render_state(state: ConsentState, consent_id: str = "") -> HTMLResponse:
    """Render a state that is shown locally.

    Redirected is turned into a 303 by the route and Loading never outlives
    a request, so neither has a page.
    """
    if isinstance(state, (Ready, Authorizing)):
        return render_consent(state, consent_id)
    if isinstance(state, Failed):
        return _error_page(state.messages, state.status_code)
    raise TypeError(f"no page for consent state {type(state).__name__}")


def render_in_progress() -> HTMLResponse:
    return _error_page(
        ("Authorization is already in progress",), status.HTTP_409_CONFLICT
    )


def render_expired() -> HTMLResponse:
    return _error_page(
        (
            "Consent request expired",
            "Return to the application and start the authorization again.",
        ),
        status.HTTP_404_NOT_FOUND,
    )


def render_landing(demo_url: str | None) -> HTMLResponse:
    demo = (
        f'<p style="text-align: center; margin-top: 1rem">'
        f'<a href="{html.escape(demo_url, quote=True)}">Try Demo Authorization</a></p>'
        if demo_url
        else ""
    )
    body = (
        "<h1>OAuth Authorization</h1>"
        '<p class="muted">Secure authorization flow for connected applications.</p>'
        f"{demo}"
    )
    return _page("OAuth Authorization", "landing-screen", body)
