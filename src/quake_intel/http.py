"""Shared HTTP session for upstream feed requests."""

from __future__ import annotations

from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def create_session(
    pool_size: int = 4,
    user_agent: str = "quake-intel",
) -> Session:
    """Create a requests Session sized for concurrent fan-out.

    Retries are disabled; a failed fetch fails the enclosing request.
    The pool holds ``pool_size`` connections per host.
    """
    retry = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(
        max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size,
    )
    session = Session()
    session.headers["User-Agent"] = user_agent
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session
