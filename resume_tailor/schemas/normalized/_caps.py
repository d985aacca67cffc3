from __future__ import annotations

from typing import Any


def dedupe_casefold(values: Any) -> list[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return []
    seen: set[str] = set()
    output: list[str] = []
    for value in values:
        text = str(value).strip()
        key = text.casefold()
        if not text or key in seen:
            continue
        seen.add(key)
        output.append(text)
    return output


def cap_list(values: list[str], max_items: int, max_len: int | None = None) -> list[str]:
    capped = values[:max_items]
    if max_len is not None:
        capped = [value[:max_len] for value in capped]
    return capped
