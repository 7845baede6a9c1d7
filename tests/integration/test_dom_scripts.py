"""In-page scripts run against real markup in headless Chromium.

Skipped when Chromium cannot be launched (``playwright install chromium``).
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from playwright.async_api import async_playwright

from a11y_scanner.core.browser import LAUNCH_ARGS, BrowserSession
from a11y_scanner.checks.contrast import CONTRAST_SAMPLE_JS, ContrastCheck
from a11y_scanner.checks.focus import FocusOrderCheck
from a11y_scanner.checks.unfocusable import MAX_HTML_CHARS, UnfocusableInteractiveCheck

pytestmark = [pytest.mark.asyncio, pytest.mark.browser]


@asynccontextmanager
async def page_with(html: str):
    try:
        driver = await async_playwright().start()
    except Exception as e:
        pytest.skip(f"playwright driver unavailable: {e}")
    try:
        try:
            browser = await driver.chromium.launch(args=LAUNCH_ARGS)
        except Exception as e:
            pytest.skip(f"chromium unavailable: {e}")
        try:
            page = await browser.new_page()
            await page.set_content(html)
            yield BrowserSession(page)
        finally:
            await browser.close()
    finally:
        await driver.stop()


# ─── Unfocusable interactive elements ─────────────────────────────────────────

UNFOCUSABLE_PAGE = """
<button id="ok">OK</button>
<button disabled>Pay</button>
<a href="/skip" tabindex="-1">Skip</a>
<a href="/hidden" style="display:none">Hidden</a>
<span role="button" style="visibility:hidden">Close</span>
<div onclick="void 0">Clickable div</div>
<a>No destination</a>
<input type="text" id="q">
<button disabled>%s</button>
""" % ("x" * 400)


class TestUnfocusableScript:
    async def test_flags_hidden_disabled_and_negative_tabindex(self):
        async with page_with(UNFOCUSABLE_PAGE) as session:
            found = await UnfocusableInteractiveCheck().run(session)

        assert len(found) == 5
        assert found[0] == "<button disabled=\"\">Pay</button>"
        assert 'tabindex="-1"' in found[1]
        assert 'href="/hidden"' in found[2]
        assert 'role="button"' in found[3]
        assert len(found[4]) == MAX_HTML_CHARS

    async def test_reachable_elements_are_not_flagged(self):
        async with page_with(UNFOCUSABLE_PAGE) as session:
            found = await UnfocusableInteractiveCheck().run(session)

        joined = "\n".join(found)
        assert 'id="ok"' not in joined
        assert "Clickable div" not in joined
        assert "No destination" not in joined
        assert 'id="q"' not in joined


# ─── Contrast sampling ────────────────────────────────────────────────────────

CONTRAST_PAGE = """
<body style="background:#ffffff">
  <div style="background:#000000"><p id="dark" style="color:#333333">dim on black</p></div>
  <p id="grey" style="color:#999999">grey on white</p>
  <p id="ok" style="color:#000000">black on white</p>
  <p id="gone" style="color:#eeeeee; display:none">hidden</p>
  <p id="invisible" style="color:#eeeeee; visibility:hidden">invisible</p>
  <div id="wrapper" style="color:#eeeeee"><span style="color:#000000">child text</span></div>
</body>
"""


class TestContrastScript:
    async def test_samples_resolve_ancestor_background(self):
        async with page_with(CONTRAST_PAGE) as session:
            samples = await session.evaluate(CONTRAST_SAMPLE_JS)

        by_selector = {s["selector"]: s for s in samples}
        dark = by_selector["html > body > div > p#dark"]
        assert dark["fg"] == [51, 51, 51]
        assert dark["bg"] == [0, 0, 0]
        assert by_selector["html > body > p#grey"]["bg"] == [255, 255, 255]

    async def test_hidden_and_textless_elements_are_skipped(self):
        async with page_with(CONTRAST_PAGE) as session:
            samples = await session.evaluate(CONTRAST_SAMPLE_JS)

        selectors = {s["selector"] for s in samples}
        assert "html > body > p#gone" not in selectors
        assert "html > body > p#invisible" not in selectors
        assert "html > body > div#wrapper" not in selectors
        assert "html > body > div#wrapper > span" in selectors

    async def test_transparent_chain_defaults_to_white(self):
        async with page_with('<p id="plain" style="color:#777777">plain</p>') as session:
            samples = await session.evaluate(CONTRAST_SAMPLE_JS)

        assert samples == [{"selector": "html > body > p#plain", "fg": [119, 119, 119], "bg": [255, 255, 255]}]

    async def test_only_failing_pairs_are_reported(self):
        async with page_with(CONTRAST_PAGE) as session:
            pairs = await ContrastCheck().run(session)

        assert {p.selector for p in pairs} == {"html > body > div > p#dark", "html > body > p#grey"}
        assert all(p.ratio < 4.5 for p in pairs)


# ─── Focus order ──────────────────────────────────────────────────────────────

FOCUS_PAGE = """
<a id="home" href="#top" aria-label="Home page">H</a>
<input id="go" type="image" alt="Search" src="data:,">
<button>   Save changes   </button>
<button disabled>Unavailable</button>
<a href="#skip" tabindex="-1">Skipped</a>
<details><summary>More</summary>details body</details>
"""


class TestFocusScript:
    async def test_walk_follows_browser_tab_order(self):
        async with page_with(FOCUS_PAGE) as session:
            entries = await FocusOrderCheck().run(session)

        assert [e.name for e in entries] == ["Home page", "Search", "Save changes", "More"]
        assert [e.index for e in entries] == [1, 2, 3, 4]
        assert entries[0].selector == "html > body > a#home"
        assert entries[0].role == "a"
        assert entries[1].selector == "html > body > input#go"
        assert entries[3].selector == "html > body > details > summary"

    async def test_stops_outside_candidate_selector_are_walked(self):
        async with page_with("<details><summary>Only stop</summary>body</details>") as session:
            entries = await FocusOrderCheck().run(session)

        assert [e.name for e in entries] == ["Only stop"]
        assert entries[0].role == "summary"
