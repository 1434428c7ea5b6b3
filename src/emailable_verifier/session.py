"""HTTP session factory."""

from __future__ import annotations

from requests import Session
from requests.adapters import HTTPAdapter


def make_session(user_agent: str) -> Session:
    """Create a requests session with JSON defaults and no automatic retries."""
    session = Session()
    session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session
