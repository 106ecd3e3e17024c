"""Image downloading for expired postings."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from .models import AllocatedAsset, ClassifiedRecord
from .utils import FilenameAllocator

logger = logging.getLogger("internship_sync")

IMAGE_SUFFIX_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
CONTENT_TYPE_EXTENSIONS = ("png", "gif", "webp")
DEFAULT_EXTENSION = "jpg"
DEFAULT_TIMEOUT = 15.0


def infer_extension(url: str, content_type: Optional[str]) -> str:
    """Guess an image file extension from the URL path or the Content-Type."""
    match = IMAGE_SUFFIX_PATTERN.search(urlparse(url).path)
    if match:
        return match.group(1).lower()
    lowered = (content_type or "").lower()
    for ext in CONTENT_TYPE_EXTENSIONS:
        if ext in lowered:
            return ext
    return DEFAULT_EXTENSION


def fetch_asset(
    session: requests.Session,
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> Tuple[bytes, str]:
    """Fetch ``url`` once and return its bytes with a file extension."""
    resp = session.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.content, infer_extension(url, resp.headers.get("Content-Type"))


def prepare_asset_dir(asset_dir: Path) -> Path:
    """Create ``asset_dir`` if needed and remove files left by earlier runs."""
    asset_dir.mkdir(parents=True, exist_ok=True)
    for stale in asset_dir.iterdir():
        if stale.is_file():
            stale.unlink()
    return asset_dir


async def build_http_session(context, user_agent: Optional[str] = None) -> requests.Session:
    """Create a requests session that shares the browser context's cookies."""
    session = requests.Session()
    if user_agent:
        session.headers["User-Agent"] = user_agent
    for cookie in await context.cookies():
        session.cookies.set(
            cookie["name"],
            cookie["value"],
            domain=cookie.get("domain", ""),
            path=cookie.get("path", "/"),
        )
    return session


def download_assets(
    records: Iterable[ClassifiedRecord],
    asset_dir: Path,
    session: requests.Session,
    allocator: Optional[FilenameAllocator] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[AllocatedAsset]:
    """Download the image of each record into ``asset_dir``, one at a time."""
    allocator = allocator or FilenameAllocator()
    assets: List[AllocatedAsset] = []

    for record in records:
        if not record.image_source:
            logger.info("No image for %s; skipping download", record.label)
            continue

        base_name = allocator.allocate(record.label)
        try:
            data, extension = fetch_asset(session, record.image_source, timeout=timeout)
        except requests.RequestException as exc:
            logger.warning("Failed to fetch image for %s: %s", record.label, exc)
            continue

        destination = asset_dir / f"{base_name}.{extension}"
        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to write image for %s: %s", record.label, exc)
            continue

        logger.info("Saved image for %s to %s", record.label, destination)
        assets.append(
            AllocatedAsset(
                record=record,
                base_name=base_name,
                extension=extension,
                path=destination,
            )
        )
    return assets
