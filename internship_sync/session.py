"""Sign-in flow for the portal's identity provider."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from .config import SyncConfig

logger = logging.getLogger("internship_sync")

_FIELD_PAUSE_MS = 1000


async def sign_in(page: Page, config: SyncConfig) -> None:
    """Walk through the email, password and push-factor screens.

    Returns once the portal page shows its landing marker. Each wait is
    bounded, so a stuck sign-in surfaces as a Playwright ``TimeoutError``.
    """
    selectors = config.login
    credentials = config.credentials
    login_timeout = int(config.login_timeout * 1000)

    logger.info("Loading %s", config.portal_url)
    await page.goto(config.portal_url)

    await page.wait_for_selector(selectors.email_input)
    await page.fill(selectors.email_input, credentials.account_id)
    await page.wait_for_timeout(_FIELD_PAUSE_MS)
    await page.click(selectors.email_submit)

    await page.wait_for_selector(selectors.password_input)
    await page.fill(selectors.password_input, credentials.account_secret)
    await page.wait_for_timeout(_FIELD_PAUSE_MS)
    await page.click(selectors.password_submit)

    logger.info("Requesting push notification; approve it on your device")
    await page.click(selectors.push_factor)

    await page.wait_for_selector(selectors.landing_marker, timeout=login_timeout)
    logger.info("Signed in to %s", page.url)
