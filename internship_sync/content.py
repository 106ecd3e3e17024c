"""HTML extraction of listing records."""

from __future__ import annotations

from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .config import ListingSelectors
from .models import ListingRecord


def _resolve(base_url: str, value: Optional[str]) -> str:
    if not value:
        return ""
    return urljoin(base_url, value.strip())


def extract_records(
    container_html: str,
    base_url: str,
    selectors: Optional[ListingSelectors] = None,
) -> List[ListingRecord]:
    """Read every anchor inside the container's list items into records.

    The HTML is a snapshot taken while the container was fully rendered,
    so the returned list does not change if the live page does.
    """
    selectors = selectors or ListingSelectors()
    soup = BeautifulSoup(container_html, "html.parser")

    records: List[ListingRecord] = []
    for anchor in soup.select(f"{selectors.item} {selectors.anchor}"):
        title = anchor.select_one(selectors.title)
        image = anchor.find("img")
        records.append(
            ListingRecord(
                label=title.get_text().strip() if title else "",
                target_link=_resolve(base_url, anchor.get("href")),
                image_source=_resolve(base_url, image.get("src")) if image else "",
            )
        )
    return records
