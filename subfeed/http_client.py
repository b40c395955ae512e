"""Shared HTTP client for upstream Google API calls."""

import requests

_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return a shared requests.Session.

    No retry adapter is mounted: a failed upstream call is reported once and
    handled by the caller.
    """
    global _session
    if _session is None:
        _session = requests.Session()
    return _session
