"""High-level orchestration: snapshot, classify, download and reconcile."""

from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, List, Optional, Sequence, TextIO

import requests
from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    async_playwright,
)

from .config import SyncConfig
from .content import extract_records
from .dates import classify_records
from .images import build_http_session, download_assets, prepare_asset_dir
from .models import ClassifiedRecord, ListingRecord, SyncResult
from .reconcile import QuickLinksReconciler, ReconciliationError
from .session import sign_in
from .utils import FilenameAllocator

logger = logging.getLogger("internship_sync")

_SET_ZOOM = "zoom => { document.body.style.zoom = zoom; }"


@asynccontextmanager
async def fully_rendered(page: Page, zoom: float) -> AsyncIterator[Page]:
    """Shrink the page so lazily rendered cards materialize, then restore it."""
    await page.evaluate(_SET_ZOOM, str(zoom))
    try:
        yield page
    finally:
        await page.evaluate(_SET_ZOOM, "1.00")


async def snapshot_listing(page: Page, config: SyncConfig) -> List[ListingRecord]:
    """Read the active postings container into a list of records."""
    selectors = config.listing
    async with fully_rendered(page, config.render_zoom):
        await page.wait_for_selector(
            selectors.container, timeout=int(config.render_timeout * 1000)
        )
        html = await page.locator(selectors.container).first.inner_html()
    records = extract_records(html, page.url, selectors)
    logger.info("Extracted %d posting(s) from the listing", len(records))
    return records


def emit_report(expired: Sequence[ClassifiedRecord], stream: Optional[TextIO] = None) -> None:
    """Write the expired postings to ``stream`` as a JSON array."""
    stream = stream or sys.stdout
    stream.write(json.dumps([item.to_report() for item in expired], indent=2, ensure_ascii=False))
    stream.write("\n")
    stream.flush()


async def synchronize(
    records: Sequence[ListingRecord],
    config: SyncConfig,
    *,
    reconciler,
    http_session: Optional[requests.Session],
    reference: Optional[date] = None,
    report_stream: Optional[TextIO] = None,
    result: Optional[SyncResult] = None,
) -> SyncResult:
    """Classify ``records`` and act on the expired ones.

    Progress is written into ``result`` as each stage finishes, so a caller
    that owns it still sees what was done when a later stage raises.
    """
    result = result if result is not None else SyncResult()
    result.records = list(records)
    classified = classify_records(result.records, reference or config.reference_date)
    result.expired = [item for item in classified if item.is_expired]
    logger.info(
        "%d of %d posting(s) are past due", len(result.expired), len(result.records)
    )
    emit_report(result.expired, report_stream)

    if config.report_only:
        return result

    if not config.skip_assets and http_session is not None:
        asset_dir = prepare_asset_dir(config.output_root)
        result.assets = download_assets(
            result.expired,
            asset_dir,
            http_session,
            FilenameAllocator(),
            timeout=config.asset_timeout,
        )

    try:
        await reconciler.reconcile(result.expired)
    finally:
        result.reconciled = reconciler.reconciled
    return result


async def _fail(page: Page, config: SyncConfig, result: SyncResult, message: str) -> None:
    result.error = message
    if config.failure_pause_seconds:
        await page.wait_for_timeout(config.failure_pause_seconds * 1000)


async def run_sync(config: SyncConfig) -> SyncResult:
    """Sign in, then run the whole pipeline once against the live portal."""
    start = time.perf_counter()
    result = SyncResult()
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=config.headless)
        page = await browser.new_page()
        page.set_default_timeout(config.navigation_timeout * 1000)
        try:
            await sign_in(page, config)
            records = await snapshot_listing(page, config)
            result.records = records
            http_session = None
            if not config.report_only and not config.skip_assets:
                user_agent = await page.evaluate("navigator.userAgent")
                http_session = await build_http_session(page.context, user_agent)
            await synchronize(
                records,
                config,
                reconciler=QuickLinksReconciler(page, config),
                http_session=http_session,
                result=result,
            )
            if config.linger_seconds:
                await page.wait_for_timeout(config.linger_seconds * 1000)
        except (ReconciliationError, PlaywrightError) as exc:
            logger.error("Error: %s", exc)
            await _fail(page, config, result, str(exc))
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected error during sync")
            await _fail(page, config, result, f"{type(exc).__name__}: {exc}")
        finally:
            await browser.close()

    logger.info("Finished in %.2fs", time.perf_counter() - start)
    return result
