"""Cursor pagination over creation order.

Pages are returned newest first. A cursor is an opaque signed token that
names the last record of the previous page; the next page continues
strictly after it in `(-created_at, -id)` order, so records inserted
while a client pages never shift the remaining results.
"""

from dataclasses import dataclass, field

from django.core import signing
from django.db.models import Q
from django.utils.dateparse import parse_datetime

from .conf import get_setting
from .exceptions import ValidationFailed

CURSOR_SALT = "storefront.store.pagination"


@dataclass
class Page:
    """One page of results plus the continuation cursor."""

    page: list = field(default_factory=list)
    is_done: bool = True
    continue_cursor: str | None = None

    def as_dict(self, serialize) -> dict:
        return {
            "page": [serialize(item) for item in self.page],
            "isDone": self.is_done,
            "continueCursor": self.continue_cursor,
        }


def encode_cursor(obj) -> str:
    return signing.dumps(
        {"c": obj.created_at.isoformat(), "i": str(obj.pk)},
        salt=CURSOR_SALT,
        compress=True,
    )


def decode_cursor(cursor: str):
    """Return (created_at, pk) from a cursor token."""
    try:
        data = signing.loads(cursor, salt=CURSOR_SALT)
        created_at = parse_datetime(data["c"])
        pk = data["i"]
    except (signing.BadSignature, KeyError, TypeError, ValueError):
        raise ValidationFailed("Invalid cursor")
    if created_at is None:
        raise ValidationFailed("Invalid cursor")
    return created_at, pk


def clamp_page_size(num_items) -> int:
    """Validate a requested page size, applying the configured default and cap."""
    if num_items in (None, ""):
        return get_setting("DEFAULT_PAGE_SIZE")
    try:
        num_items = int(num_items)
    except (TypeError, ValueError):
        raise ValidationFailed("numItems must be an integer")
    if num_items < 1:
        raise ValidationFailed("numItems must be at least 1")
    return min(num_items, get_setting("MAX_PAGE_SIZE"))


def paginate(queryset, num_items=None, cursor: str | None = None) -> Page:
    """Return one page of `queryset`, newest first."""
    size = clamp_page_size(num_items)
    queryset = queryset.order_by("-created_at", "-pk")

    if cursor:
        created_at, pk = decode_cursor(cursor)
        queryset = queryset.filter(
            Q(created_at__lt=created_at) | Q(created_at=created_at, pk__lt=pk)
        )

    rows = list(queryset[: size + 1])
    is_done = len(rows) <= size
    rows = rows[:size]

    if rows:
        continue_cursor = encode_cursor(rows[-1])
    else:
        continue_cursor = cursor or None

    return Page(page=rows, is_done=is_done, continue_cursor=continue_cursor)


def empty_page() -> Page:
    return Page(page=[], is_done=True, continue_cursor=None)
