"""Keyboard focus order, as a Tab-only keyboard user would experience it."""

from typing import List, Set, Tuple

from a11y_scanner.core.logger import get_logger
from a11y_scanner.models.schemas import FocusOrderEntry

logger = get_logger(__name__)

MAX_STEPS = 300
MAX_NAME_CHARS = 120

FOCUSABLE_SELECTOR = (
    'a[href], button, input, select, textarea, [tabindex], [contenteditable="true"]'
)

# Disabled and negative-tabindex elements are never expected stops. The count
# is logged for comparison with the walk; the browser decides where focus goes.
COUNT_FOCUSABLE_JS = """
(selector) => Array.from(document.querySelectorAll(selector)).filter((el) => {
  if (el.hasAttribute("disabled")) return false;
  const tabindex = el.getAttribute("tabindex");
  return tabindex === null || parseInt(tabindex, 10) >= 0;
}).length
"""

RESET_FOCUS_JS = """
() => {
  if (document.activeElement && document.activeElement.blur) document.activeElement.blur();
}
"""

ACTIVE_ELEMENT_JS = """
(maxName) => {
  const el = document.activeElement;
  if (!el || el === document.body || el === document.documentElement) return null;
  const segs = [];
  for (let node = el; node && node.nodeType === 1; node = node.parentElement) {
    segs.unshift(node.tagName.toLowerCase() + (node.id ? "#" + node.id : ""));
  }
  const name =
    el.getAttribute("aria-label") ||
    el.getAttribute("alt") ||
    (el.textContent || "").trim().slice(0, maxName);
  return {
    selector: segs.join(" > "),
    role: el.getAttribute("role") || el.tagName.toLowerCase(),
    name,
    visible: !!(el.offsetWidth || el.offsetHeight || el.getClientRects().length),
  };
}
"""


class FocusOrderCheck:
    key = "focus_order"
    title = "Keyboard focus order"

    def __init__(self, max_steps: int = MAX_STEPS):
        self.max_steps = max_steps

    async def run(self, session) -> List[FocusOrderEntry]:
        # advisory only: the walk runs regardless, the browser picks the stops
        candidates = await session.evaluate(COUNT_FOCUSABLE_JS, FOCUSABLE_SELECTOR)
        logger.debug("focus walk started", candidates=candidates, max_steps=self.max_steps)

        await session.evaluate(RESET_FOCUS_JS)
        entries: List[FocusOrderEntry] = []
        seen: Set[Tuple[str, str]] = set()

        for _ in range(self.max_steps):
            await session.press("Tab")
            info = await session.evaluate(ACTIVE_ELEMENT_JS, MAX_NAME_CHARS)
            if not info:
                break
            name = str(info.get("name") or "")[:MAX_NAME_CHARS]
            selector = str(info.get("selector") or "")
            stop = (selector, name)
            if stop in seen:
                # wrapped around the tab cycle
                break
            seen.add(stop)
            entries.append(FocusOrderEntry(
                index=len(entries) + 1,
                selector=selector,
                role=str(info.get("role") or ""),
                name=name,
                visible=bool(info.get("visible")),
            ))
        return entries
