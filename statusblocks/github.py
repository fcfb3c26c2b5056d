"""Unread GitHub notification counts and the block state derived from them."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from statusblocks.core import BlockError, State

DEFAULT_FORMAT = " $icon $total.eng(w:1) "
API_URL = "https://api.github.com/notifications?per_page=100&page={page}"
TOKEN_ENV = "I3RS_GITHUB_TOKEN"
MAX_PAGES = 99
_TIMEOUT = 30.0

REASONS = (
    "assign",
    "author",
    "comment",
    "ci_activity",
    "invitation",
    "manual",
    "mention",
    "review_requested",
    "security_alert",
    "state_change",
    "subscribed",
    "team_mention",
)


def aggregate_stats(reasons: Iterable[str]) -> Dict[str, int]:
    """Count notifications per reason, with ``total`` and every known reason present."""
    counts = Counter(reasons)
    stats: Dict[str, int] = dict(counts)
    stats["total"] = sum(counts.values())
    for reason in REASONS:
        stats.setdefault(reason, 0)
    return stats


def stats_state(
    stats: Mapping[str, int],
    critical: Optional[Sequence[str]] = None,
    warning: Optional[Sequence[str]] = None,
    info: Optional[Sequence[str]] = None,
    good: Optional[Sequence[str]] = None,
) -> State:
    """The most severe state whose list names a reason with pending notifications."""
    for names, state in (
        (critical, State.CRITICAL),
        (warning, State.WARNING),
        (info, State.INFO),
        (good, State.GOOD),
    ):
        if names and any(stats.get(name, 0) > 0 for name in names):
            return state
    return State.IDLE


def should_show(stats: Mapping[str, int], hide_if_total_is_zero: bool = False) -> bool:
    """Whether the block is visible for these statistics."""
    return stats.get("total", 0) > 0 or not hide_if_total_is_zero


def parse_page(payload: Union[bytes, str, Any]) -> List[str]:
    """Reasons of the notifications on one page of the API response.

    An error object from the API raises BlockError with its message.
    """
    try:
        data = json.loads(payload) if isinstance(payload, (bytes, bytearray, str)) else payload
    except (ValueError, UnicodeDecodeError) as exc:
        raise BlockError("Failed to get JSON") from exc

    if isinstance(data, list):
        reasons = []
        for item in data:
            reason = item.get("reason") if isinstance(item, dict) else None
            if not isinstance(reason, str):
                raise BlockError("Failed to get JSON")
            reasons.append(reason)
        return reasons
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        raise BlockError(f"API error: {data['message']}")
    raise BlockError("Failed to get JSON")


def fetch_page(token: str, page: int) -> List[str]:
    """Fetch one page of notifications and return their reasons."""
    request = urllib.request.Request(
        API_URL.format(page=page),
        headers={
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "statusblocks",
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT) as response:
            body = response.read()
    except urllib.error.HTTPError as err:
        try:
            body = err.read()
        except OSError as exc:
            raise BlockError("Failed to get JSON") from exc
    except (urllib.error.URLError, OSError) as exc:
        raise BlockError("Failed to send request") from exc
    return parse_page(body)


def get_stats(token: str) -> Dict[str, int]:
    """Walk the notification pages until an empty one and aggregate the reasons."""
    reasons: List[str] = []
    for page in range(1, MAX_PAGES + 1):
        on_page = fetch_page(token, page)
        if not on_page:
            break
        reasons.extend(on_page)
    return aggregate_stats(reasons)