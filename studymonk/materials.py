from __future__ import annotations

import re
import typing as t

JsonDict = dict[str, t.Any]

ALL_CATEGORIES = "all"

_FILENAME = re.compile(r'filename="(.+)"')


def categories(materials: list[JsonDict]) -> list[JsonDict]:
    seen: list[str] = []
    for material in materials:
        subject = material.get("subject")
        if subject and subject not in seen:
            seen.append(subject)
    return [{"label": s, "value": s} for s in seen]


def filter_by_category(materials: list[JsonDict], category: str | None) -> list[JsonDict]:
    if not category or category == ALL_CATEGORIES:
        return list(materials)
    return [m for m in materials if m.get("subject") == category]


def _matches(material: JsonDict, query: str) -> bool:
    if query in str(material.get("title") or "").lower():
        return True
    if query in str(material.get("description") or "").lower():
        return True
    return any(query in str(tag).lower() for tag in material.get("tags") or [])


def search(materials: list[JsonDict], query: str | None, category: str | None = ALL_CATEGORIES) -> list[JsonDict]:
    q = (query or "").strip().lower()
    in_category = filter_by_category(materials, category)
    if not q:
        return in_category
    return [m for m in in_category if _matches(m, q)]


def filename_from_disposition(header: str | None, material_id: str) -> str:
    if header:
        m = _FILENAME.search(header)
        if m:
            return m.group(1)
    return f"material-{material_id}"
