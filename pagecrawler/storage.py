"""Filesystem-backed storage for fetched pages.

Storage owns the on-disk layout. Each page becomes two artifacts in the
storage root, sharing a `<crawl_time>_<uid>` stem:

- `<stem>.respbin`: raw response body bytes
- `<stem>.httpi`: JSON of every other Page field
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator, Mapping

from .constants import JSON_INDENT, LOG_SUBDIR, PAGE_BODY_SUFFIX, PAGE_INFO_SUFFIX
from .types import JSONDict, Page


logger = logging.getLogger(__name__)


class Storage:
    """Persist and reload pages under a single `root` directory.

    The directory is created on the first write.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    @property
    def paths(self) -> JSONDict:
        """Return important paths for logging/CLI status messages."""

        return {
            "storage_dir": str(self.root),
            "log_dir": str(self.root / LOG_SUBDIR),
        }

    @staticmethod
    def page_stem(page: Page) -> str:
        return f"{page.crawl_time}_{page.uid}"

    def info_path_for(self, page: Page) -> Path:
        return self.root / f"{self.page_stem(page)}{PAGE_INFO_SUFFIX}"

    def body_path_for(self, page: Page) -> Path:
        return self.root / f"{self.page_stem(page)}{PAGE_BODY_SUFFIX}"

    def save_page(self, page: Page) -> tuple[Path, Path]:
        """Write body and metadata artifacts; returns (info_path, body_path).

        I/O errors propagate to the caller.
        """

        self.root.mkdir(parents=True, exist_ok=True)

        body_path = self.body_path_for(page)
        info_path = self.info_path_for(page)
        self._atomic_write_bytes(body_path, page.body)
        self._atomic_write_json(info_path, page.to_json())

        logger.debug("Saved %s to %s", page.url, info_path.name)
        return info_path, body_path

    def page_info_files(self) -> list[Path]:
        """All metadata artifacts in the storage root, sorted by name."""

        if not self.root.is_dir():
            return []
        return sorted(
            path
            for path in self.root.iterdir()
            if path.is_file() and path.suffix == PAGE_INFO_SUFFIX
        )

    def load_page(self, info_path: str | Path, *, with_body: bool = False) -> Page:
        """Rebuild a Page from its metadata artifact (and body artifact)."""

        info_path = Path(info_path)
        payload = json.loads(info_path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Page info at {info_path} must be a JSON object")

        body = b""
        if with_body:
            body_path = info_path.with_suffix(PAGE_BODY_SUFFIX)
            try:
                body = body_path.read_bytes()
            except FileNotFoundError:
                logger.warning("Missing body artifact %s, loading empty body", body_path)

        return Page.from_json(payload, body=body)

    def iter_pages(self, *, with_body: bool = False) -> Iterator[Page]:
        for path in self.page_info_files():
            yield self.load_page(path, with_body=with_body)

    @staticmethod
    def _atomic_write_bytes(path: Path, data: bytes) -> None:
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(tmp_fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    @classmethod
    def _atomic_write_json(cls, path: Path, payload: Mapping[str, Any]) -> None:
        content = json.dumps(payload, ensure_ascii=False, indent=JSON_INDENT, sort_keys=True) + "\n"
        cls._atomic_write_bytes(path, content.encode("utf-8"))


__all__ = ["Storage"]
