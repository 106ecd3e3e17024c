"""In-process stand-ins for the Playwright page and the HTTP session."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest
import requests
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from internship_sync.config import Credentials, ReconcileSelectors, SyncConfig


class FakeLocator:
    def __init__(self, name: str, log: List[tuple], registry: "FakeRegistry", *,
                 visible: bool = True, checked: bool = False, count: int = 1,
                 html: str = "") -> None:
        self.name = name
        self.log = log
        self.registry = registry
        self.visible = visible
        self.checked = checked
        self._count = count
        self.html = html
        self.value = ""
        self.nth_index: Optional[int] = None
        # name of whatever the last lookup of this locator was chained from
        self.scope: Optional[str] = None

    @property
    def first(self) -> "FakeLocator":
        return self

    def nth(self, index: int) -> "FakeLocator":
        self.nth_index = index
        return self

    def locator(self, selector: str) -> "FakeLocator":
        child = self.registry.locator(selector)
        child.scope = self.name
        return child

    def _require_visible(self, timeout) -> None:
        if not self.visible:
            raise PlaywrightTimeoutError(
                f"Timeout {timeout}ms exceeded waiting for {self.name}"
            )

    async def wait_for(self, state: str = "visible", timeout=None) -> None:
        self._require_visible(timeout)

    async def click(self, timeout=None) -> None:
        self._require_visible(timeout)
        self.log.append(("click", self.name))
        self.checked = not self.checked

    async def fill(self, value: str, timeout=None) -> None:
        self._require_visible(timeout)
        self.log.append(("fill", self.name, value))
        self.value = value

    async def focus(self, timeout=None) -> None:
        self._require_visible(timeout)
        self.log.append(("focus", self.name))

    async def is_checked(self, timeout=None) -> bool:
        self._require_visible(timeout)
        return self.checked

    async def count(self) -> int:
        return self._count

    async def inner_html(self, timeout=None) -> str:
        return self.html


class FakeRegistry:
    def __init__(self, name: str, log: List[tuple]) -> None:
        self.name = name
        self.log = log
        self.locators: Dict[str, FakeLocator] = {}

    def add(self, selector: str, name: str, **kwargs) -> FakeLocator:
        loc = FakeLocator(f"{self.name}:{name}", self.log, self, **kwargs)
        self.locators[selector] = loc
        return loc

    def locator(self, selector: str) -> FakeLocator:
        if selector not in self.locators:
            self.locators[selector] = FakeLocator(
                f"{self.name}:{selector}", self.log, self, visible=False, count=0
            )
        loc = self.locators[selector]
        loc.scope = self.name
        return loc


class FakeFrame(FakeRegistry):
    def __init__(self, name: str, log: List[tuple], url: str = "about:blank") -> None:
        super().__init__(name, log)
        self.url = url


class FakeKeyboard:
    def __init__(self, log: List[tuple]) -> None:
        self.log = log

    async def press(self, keys: str) -> None:
        self.log.append(("press", keys))


class FakeContext:
    async def cookies(self):
        return [
            {"name": "FedAuth", "value": "abc", "domain": ".example.edu", "path": "/"},
            {"name": "rtFa", "value": "xyz", "domain": ".example.edu", "path": "/"},
        ]


class FakeBrowser:
    def __init__(self, page: "FakePage") -> None:
        self.page = page
        self.closed = False

    async def new_page(self) -> "FakePage":
        return self.page

    async def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, browser: FakeBrowser) -> None:
        self.browser = browser
        self.launch_options: dict = {}

    async def launch(self, **kwargs) -> FakeBrowser:
        self.launch_options = kwargs
        return self.browser


class FakePlaywright:
    """Stands in for ``async_playwright()``; usable as an async context manager."""

    def __init__(self, page: "FakePage") -> None:
        self.browser = FakeBrowser(page)
        self.chromium = FakeChromium(self.browser)

    def __call__(self) -> "FakePlaywright":
        return self

    async def __aenter__(self) -> "FakePlaywright":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


class FakePage(FakeRegistry):
    def __init__(self, log: List[tuple], url: str = "https://portal.example.edu/sites/x/Page.aspx") -> None:
        super().__init__("page", log)
        self.url = url
        self.frames: List[FakeFrame] = []
        self.keyboard = FakeKeyboard(log)
        self.missing_selectors: set = set()
        self.context = FakeContext()

    def set_default_timeout(self, timeout: float) -> None:
        self.log.append(("set_default_timeout", timeout))

    async def evaluate(self, expression: str, arg=None):
        self.log.append(("evaluate", arg))

    async def wait_for_selector(self, selector: str, timeout=None) -> None:
        if selector in self.missing_selectors:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        self.log.append(("wait_for_selector", selector))

    async def goto(self, url: str, **kwargs) -> None:
        self.log.append(("goto", url))

    async def fill(self, selector: str, value: str, **kwargs) -> None:
        self.log.append(("fill", selector, value))

    async def click(self, selector: str, **kwargs) -> None:
        self.log.append(("click", selector))

    async def wait_for_timeout(self, timeout: float) -> None:
        self.log.append(("wait_for_timeout", timeout))


class FakeResponse:
    def __init__(self, content: bytes = b"", content_type: str = "", status_code: int = 200) -> None:
        self.content = content
        self.headers = {"Content-Type": content_type} if content_type else {}
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, responses: Dict[str, FakeResponse]) -> None:
        self.responses = responses
        self.requested: List[str] = []

    def get(self, url: str, timeout=None) -> FakeResponse:
        self.requested.append(url)
        if url not in self.responses:
            raise requests.ConnectionError(f"connection refused: {url}")
        return self.responses[url]


@pytest.fixture
def config(tmp_path: Path) -> SyncConfig:
    return SyncConfig(
        output_root=tmp_path / "assets",
        credentials=Credentials("student@example.edu", "hunter2"),
        step_timeout=0.05,
        linger_seconds=0,
        failure_pause_seconds=0,
    )


@pytest.fixture
def log() -> List[tuple]:
    return []


@pytest.fixture
def editor_page(log: List[tuple]) -> FakePage:
    """A page whose editor exposes every control the reconciler needs."""
    selectors = ReconcileSelectors()
    page = FakePage(log)
    page.add(selectors.target_region, "region")
    page.add(selectors.add_link, "add_link")
    page.add(selectors.from_link, "from_link")
    page.add(selectors.confirm_add, "outer_confirm")
    page.add(selectors.label_input, "label")
    page.add(selectors.new_tab_toggle, "new_tab", checked=False)
    page.add(selectors.position_marker, "entry")
    page.add(selectors.reorder_handle, "reorder")

    main_frame = FakeFrame("main", log, url=page.url)
    picker = FakeFrame("picker", log, url="https://picker.example.com/")
    picker.add(selectors.url_input, "url")
    picker.add(selectors.confirm_add, "confirm")
    page.frames = [main_frame, picker]
    return page
