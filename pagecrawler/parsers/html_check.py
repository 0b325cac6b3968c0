"""Allow-list HTML validation: report tags and attributes outside a whitelist."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from bs4 import BeautifulSoup, Tag

from ..constants import JSON_INDENT
from ..types import FindingKind, JSONDict, ValidationFinding


# Inserted by the lxml tree builder around fragments; never reported unless listed.
IMPLICIT_TAGS = frozenset({"html", "head", "body"})


@dataclass(frozen=True, slots=True)
class ValidTag:
    """One permitted tag and the attributes it may carry."""

    name: str
    attrs: tuple[str, ...] = ()
    attr_starts_with: str = ""
    attr_regex: str = ""
    self_closing: bool = False
    _attr_pattern: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name.lower())
        object.__setattr__(self, "attrs", tuple(attr.lower() for attr in self.attrs))
        if self.attr_regex:
            object.__setattr__(self, "_attr_pattern", re.compile(self.attr_regex))

    def allows_attribute(self, attribute: str) -> bool:
        attribute = attribute.lower()
        if attribute in self.attrs:
            return True
        if self.attr_starts_with and attribute.startswith(self.attr_starts_with):
            return True
        if self._attr_pattern is not None and self._attr_pattern.fullmatch(attribute):
            return True
        return False

    def to_json(self) -> JSONDict:
        return {
            "name": self.name,
            "attrs": list(self.attrs),
            "attr_starts_with": self.attr_starts_with,
            "attr_regex": self.attr_regex,
            "self_closing": self.self_closing,
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ValidTag":
        name = str(payload.get("name", "")).strip()
        if not name:
            raise ValueError(f"Valid tag entry missing 'name': {payload!r}")
        return cls(
            name=name,
            attrs=tuple(str(attr) for attr in payload.get("attrs") or []),
            attr_starts_with=str(payload.get("attr_starts_with") or ""),
            attr_regex=str(payload.get("attr_regex") or ""),
            self_closing=bool(payload.get("self_closing", False)),
        )


def load_valid_tags(path: str | Path) -> list[ValidTag]:
    """Load an allow-list written by `save_valid_tags`."""

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Valid tag file {path} must contain a JSON list")
    return [ValidTag.from_json(item) for item in payload]


def save_valid_tags(tags: Iterable[ValidTag], path: str | Path) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps([tag.to_json() for tag in tags], indent=JSON_INDENT) + "\n",
        encoding="utf-8",
    )


class HTMLValidator:
    """Check a parsed document against a tag/attribute allow-list."""

    def __init__(self, valid_tags: Iterable[ValidTag]) -> None:
        self._tags = {tag.name: tag for tag in valid_tags}

    def validate(self, soup: BeautifulSoup) -> list[ValidationFinding]:
        findings: list[ValidationFinding] = []

        for element in soup.find_all(True):
            if not isinstance(element, Tag):
                continue
            name = element.name.lower()
            valid = self._tags.get(name)

            if valid is None:
                if name in IMPLICIT_TAGS:
                    continue
                findings.append(
                    ValidationFinding(
                        kind=FindingKind.INVALID_TAG,
                        tag=name,
                        message=f"tag <{name}> is not permitted",
                    )
                )
                continue

            for attribute in element.attrs:
                if valid.allows_attribute(attribute):
                    continue
                findings.append(
                    ValidationFinding(
                        kind=FindingKind.INVALID_ATTRIBUTE,
                        tag=name,
                        attribute=attribute,
                        message=f"attribute '{attribute}' is not permitted on <{name}>",
                    )
                )

            if valid.self_closing and element.contents:
                findings.append(
                    ValidationFinding(
                        kind=FindingKind.NOT_SELF_CLOSING,
                        tag=name,
                        message=f"tag <{name}> must be self-closing but has content",
                    )
                )

        return findings


__all__ = [
    "HTMLValidator",
    "IMPLICIT_TAGS",
    "ValidTag",
    "load_valid_tags",
    "save_valid_tags",
]
