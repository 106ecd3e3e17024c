"""Data models used throughout the sync pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ListingRecord:
    """One posting scraped from the rendered listing."""

    label: str
    target_link: str
    image_source: str = ""


@dataclass(frozen=True)
class ClassifiedRecord:
    """A scraped posting annotated with its due date."""

    record: ListingRecord
    due_date: Optional[date]
    is_expired: bool

    @property
    def label(self) -> str:
        return self.record.label

    @property
    def target_link(self) -> str:
        return self.record.target_link

    @property
    def image_source(self) -> str:
        return self.record.image_source

    def to_report(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "link": self.target_link,
            "image": self.image_source,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }


@dataclass
class AllocatedAsset:
    """Image bytes for an expired posting, stored on disk."""

    record: ClassifiedRecord
    base_name: str
    extension: str
    path: Path

    @property
    def filename(self) -> str:
        return f"{self.base_name}.{self.extension}"


@dataclass
class SyncResult:
    """Summary of one pipeline run."""

    records: List[ListingRecord] = field(default_factory=list)
    expired: List[ClassifiedRecord] = field(default_factory=list)
    assets: List[AllocatedAsset] = field(default_factory=list)
    reconciled: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
