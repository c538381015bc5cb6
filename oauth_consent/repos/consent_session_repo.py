from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from oauth_consent.services.consent_controller import ConsentController

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Entry:
    controller: ConsentController
    expires_at: float


class ConsentSessionRepo(Protocol):
    def create(self, controller: ConsentController) -> str: ...
    def get(self, consent_id: str) -> ConsentController | None: ...
    def discard(self, consent_id: str) -> None: ...


class InMemoryConsentSessionRepo:
    """Live consent controllers, keyed by an unguessable consent id.

    Holds a session between the page load (GET /oauth/authorize) and the
    decision (POST /oauth/consent/{id}).  Process memory only: a restart
    drops pending consents and the user simply reloads the page.
    """

    def __init__(
        self,
        ttl_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._by_id: dict[str, _Entry] = {}

    def create(self, controller: ConsentController) -> str:
        self.purge_expired()
        # 32 bytes: the id is the only thing tying a POST to its session.
        consent_id = secrets.token_urlsafe(32)
        self._by_id[consent_id] = _Entry(controller, self._clock() + self._ttl)
        return consent_id

    def get(self, consent_id: str) -> ConsentController | None:
        entry = self._by_id.get(consent_id)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._by_id[consent_id]
            return None
        return entry.controller

    def discard(self, consent_id: str) -> None:
        self._by_id.pop(consent_id, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [cid for cid, entry in self._by_id.items() if now >= entry.expires_at]
        for cid in expired:
            del self._by_id[cid]
        if expired:
            logger.debug("Purged expired consent sessions  count=%d", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._by_id)
