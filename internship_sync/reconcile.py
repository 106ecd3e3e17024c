"""Drive the portal editor to re-add expired postings to the inactive section."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable

from playwright.async_api import (
    Error as PlaywrightError,
    Frame,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from .config import SyncConfig
from .models import ClassifiedRecord

logger = logging.getLogger("internship_sync")

URL_INPUT_MISSING = "Could not find the URL input field in any frame"
FRAME_PROBE_INTERVAL = 0.25


class ReconciliationError(RuntimeError):
    """A required editor control never became available."""


class QuickLinksReconciler:
    """Adds postings to the inactive quick-links section, one at a time.

    Every step waits for its control with a bounded timeout; running out of
    time raises ``ReconciliationError`` and ends the whole run, since later
    insertions rely on the page being in a known state.
    """

    def __init__(self, page: Page, config: SyncConfig) -> None:
        self.page = page
        self.selectors = config.reconcile
        self.step_timeout = config.step_timeout
        self.reconciled = 0

    @property
    def timeout_ms(self) -> int:
        return int(self.step_timeout * 1000)

    @asynccontextmanager
    async def _bounded(self, step: str) -> AsyncIterator[None]:
        try:
            yield
        except PlaywrightTimeoutError as exc:
            raise ReconciliationError(
                f"Timed out after {self.step_timeout:g}s while trying to {step}"
            ) from exc

    async def _click(self, locator: Locator, step: str) -> None:
        async with self._bounded(step):
            await locator.wait_for(state="visible", timeout=self.timeout_ms)
            await locator.click(timeout=self.timeout_ms)

    async def reconcile(self, records: Iterable[ClassifiedRecord]) -> int:
        """Add each record in turn; ``self.reconciled`` survives a failure."""
        for record in records:
            await self.add_record(record)
            self.reconciled += 1
        logger.info("Reconciled %d posting(s) into the inactive section", self.reconciled)
        return self.reconciled

    async def add_record(self, record: ClassifiedRecord) -> None:
        logger.info("Adding %s to the inactive section", record.label)
        await self.open_add_link()
        frame = await self.find_url_frame()
        await self.submit_link(frame, record.target_link)
        await self.overwrite_label(record.label)
        await self.ensure_new_tab()
        await self.reposition()

    def _region(self) -> Locator:
        return self.page.locator(self.selectors.target_region).first

    async def open_add_link(self) -> None:
        region = self._region()
        await self._click(region, "activate the inactive quick-links section")
        await self._click(
            region.locator(self.selectors.add_link).first,
            "open the add-link menu",
        )

    async def find_url_frame(self) -> Frame:
        """Pick "From a link" and find the frame that holds the URL input."""
        await self._click(
            self.page.locator(self.selectors.from_link).first,
            'choose "From a link"',
        )

        deadline = time.monotonic() + self.step_timeout
        while True:
            for frame in self.page.frames:
                try:
                    if await frame.locator(self.selectors.url_input).count() > 0:
                        logger.debug("URL input found in frame %s", frame.url)
                        return frame
                except PlaywrightError as exc:
                    logger.debug("Skipping frame %s: %s", frame.url, exc)
            if time.monotonic() >= deadline:
                raise ReconciliationError(URL_INPUT_MISSING)
            await asyncio.sleep(FRAME_PROBE_INTERVAL)

    async def submit_link(self, frame: Frame, url: str) -> None:
        url_input = frame.locator(self.selectors.url_input).first
        async with self._bounded("fill the link URL"):
            await url_input.fill(url, timeout=self.timeout_ms)
        # The confirm button lives next to the input, not on the outer page.
        await self._click(frame.locator(self.selectors.confirm_add).first, "confirm the link")

    async def overwrite_label(self, label: str) -> None:
        field = self.page.locator(self.selectors.label_input).first
        async with self._bounded("edit the link title"):
            await field.wait_for(state="visible", timeout=self.timeout_ms)
            await field.fill("", timeout=self.timeout_ms)
            await field.fill(label, timeout=self.timeout_ms)

    async def ensure_new_tab(self) -> bool:
        """Switch "Open in new tab" on; returns True only if a click was needed."""
        toggle = self.page.locator(self.selectors.new_tab_toggle).first
        async with self._bounded('read the "Open in new tab" toggle'):
            await toggle.wait_for(state="visible", timeout=self.timeout_ms)
            checked = await toggle.is_checked(timeout=self.timeout_ms)
        if checked:
            return False
        await self._click(toggle, 'enable "Open in new tab"')
        return True

    async def reposition(self) -> None:
        # Markers and the reorder control are looked up inside the inactive
        # section only; the active grid uses the same markers.
        region = self._region()
        entry = region.locator(self.selectors.position_marker).nth(
            self.selectors.new_entry_index
        )
        async with self._bounded("focus the new link"):
            await entry.wait_for(state="visible", timeout=self.timeout_ms)
            await entry.focus(timeout=self.timeout_ms)
        await self._click(entry, "select the new link")
        await self._click(
            region.locator(self.selectors.reorder_handle).first,
            "open the reorder control",
        )
        await self.page.keyboard.press(self.selectors.move_left_keys)
