"""Node key helpers.

Any hashable value with a strict ``<`` can be a node key. The ordering is only
used to make output deterministic (display order, cycle seed selection), never
to decide graph semantics.
"""

import json
from collections.abc import Iterable
from typing import Any, Protocol, TypeVar


class Key(Protocol):
    """Structural type for node identities."""

    def __hash__(self) -> int: ...

    def __eq__(self, other: object) -> bool: ...

    def __lt__(self, other: Any) -> bool: ...


K = TypeVar("K", bound=Key)


def format_key(key: Any) -> str:
    """Render a key the way it appears in plans and diagrams."""
    return str(key)


def quote_key(key: Any) -> str:
    """
    Render a key as a double-quoted string with quotes and backslashes escaped.

    Args:
        key: Key (or label) to quote.

    Returns:
        str: Quoted representation, e.g. ``"web"``.
    """
    return json.dumps(format_key(key), ensure_ascii=False)


def keys_to_strings(keys: Iterable[Any]) -> list[str]:
    """Format every key in ``keys``."""
    return [format_key(k) for k in keys]
