from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Set
import json
import re

from .config import ServerOptions

_TAG_RE = re.compile(r"</?[^>]+(>|$)")
_DROPPED = object()


def has_match(value: str, criteria: Iterable[str]) -> bool:
    """True if ``value`` equals a criterion or a criterion regex matches it."""
    return any(value == item or re.search(item, value) for item in criteria)


def json_stringify(data: Any) -> str:
    """
    Serialize ``data`` to compact JSON, dropping repeated containers.

    Any dict or list that was already emitted is skipped on later
    encounters, which also breaks reference cycles. Skipped dict entries
    are omitted; skipped list items become null.
    """
    seen: Set[int] = set()

    def _strip(value: Any) -> Any:
        if not isinstance(value, (dict, list, tuple)):
            return value
        if id(value) in seen:
            return _DROPPED
        seen.add(id(value))
        if isinstance(value, dict):
            result = {}
            for key, item in value.items():
                stripped = _strip(item)
                if stripped is not _DROPPED:
                    result[key] = stripped
            return result
        return [None if stripped is _DROPPED else stripped for stripped in map(_strip, value)]

    return json.dumps(_strip(data), separators=(",", ":"), ensure_ascii=False)


def sanitize_html(text: Optional[str]) -> Optional[str]:
    """Strip anything that looks like an HTML tag."""
    return _TAG_RE.sub("", text) if text else text


def get_url_builder(options: ServerOptions) -> Callable[..., str]:
    """
    Return a function building URLs that point back at this service.

    Paths passed to the builder are expected to start with '/'.
    """

    def build_url(path: str, is_external: bool, exclude_host: bool = False) -> str:
        url = path
        if is_external:
            url = f"{options.implicit_path}{url}"
        url = f"{options.path}{url}"
        if not exclude_host:
            url = f"{options.protocol}://{options.host}{url}"
        return url

    return build_url
