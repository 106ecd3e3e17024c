"""Configuration objects and constants for the listing sync."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_PORTAL_URL = (
    "https://stevens0.sharepoint.com/sites/UndergraduateResearch/"
    "SitePages/Summer-Internships.aspx"
)
ACCOUNT_ID_ENV = "EMAIL"
ACCOUNT_SECRET_ENV = "PASSWORD"


class ConfigError(RuntimeError):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class Credentials:
    """The two factors handed to the identity provider."""

    account_id: str
    account_secret: str = field(repr=False)


@dataclass
class LoginSelectors:
    """Identity provider controls, in the order they are used."""

    email_input: str = "#i0116"
    email_submit: str = "#idSIButton9"
    password_input: str = "#input28"
    password_submit: str = 'input[type="submit"][value="Verify"]'
    push_factor: str = 'a[aria-label*="push notification to the Okta Verify app"]'
    landing_marker: str = "text=Summer Research Internships"


@dataclass
class ListingSelectors:
    """Where the active postings live on the portal page."""

    container: str = (
        '[data-automation-id="grid-layout"][aria-label*="External Research Internships"]'
    )
    item: str = '[role="listitem"]'
    anchor: str = "a[href]"
    title: str = '[data-automation-id="quick-links-item-title"]'


@dataclass
class ReconcileSelectors:
    """Controls driven while adding a posting to the inactive section."""

    target_region: str = (
        '[data-automation-id="grid-layout"][aria-label*="Inactive Research Internships"]'
    )
    add_link: str = 'button[aria-label="Add links"]'
    from_link: str = 'button:has-text("From a link")'
    url_input: str = 'input[type="url"]'
    confirm_add: str = 'button:has-text("Add")'
    label_input: str = 'input[type="text"][id^="TextField"]'
    new_tab_toggle: str = 'button[role="switch"][aria-label*="Open in new tab"]'
    position_marker: str = '[data-automation-id="quick-links-item-title"]'
    reorder_handle: str = 'button[aria-label*="Move"]'
    new_entry_index: int = 2
    move_left_keys: str = "Control+ArrowLeft"


@dataclass
class SyncConfig:
    """Top-level settings that control a single synchronization run."""

    output_root: Path
    credentials: Credentials
    portal_url: str = DEFAULT_PORTAL_URL
    headless: bool = False
    navigation_timeout: float = 30.0
    login_timeout: float = 60.0
    render_timeout: float = 60.0
    step_timeout: float = 10.0
    render_zoom: float = 0.05
    asset_timeout: float = 15.0
    linger_seconds: float = 10.0
    failure_pause_seconds: float = 30.0
    report_only: bool = False
    skip_assets: bool = False
    reference_date: Optional[date] = None
    login: LoginSelectors = field(default_factory=LoginSelectors)
    listing: ListingSelectors = field(default_factory=ListingSelectors)
    reconcile: ReconcileSelectors = field(default_factory=ReconcileSelectors)


def load_credentials(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Credentials:
    """Read the account id and secret, failing fast when either is missing."""
    if env is None:
        load_dotenv(env_file)
        env = os.environ

    account_id = (env.get(ACCOUNT_ID_ENV) or "").strip()
    account_secret = env.get(ACCOUNT_SECRET_ENV) or ""

    missing = [
        name
        for name, value in ((ACCOUNT_ID_ENV, account_id), (ACCOUNT_SECRET_ENV, account_secret))
        if not value
    ]
    if missing:
        raise ConfigError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )
    return Credentials(account_id=account_id, account_secret=account_secret)


def parse_reference_date(value: str) -> date:
    """Parse a YYYY-MM-DD override for "today"."""
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid reference date {value!r}; expected YYYY-MM-DD") from exc
