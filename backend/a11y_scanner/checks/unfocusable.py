from typing import List

MAX_ENTRIES = 100
MAX_HTML_CHARS = 200

INTERACTIVE_SELECTOR = 'a[href], button, input, select, textarea, [role="button"], [onclick]'

# Elements that look clickable but are hidden, disabled or pulled out of the
# tab sequence.
UNFOCUSABLE_JS = """
({ selector, limit, chars }) => {
  const out = [];
  for (const el of document.querySelectorAll(selector)) {
    if (out.length >= limit) break;
    const style = getComputedStyle(el);
    const hidden = style.display === "none" || style.visibility === "hidden";
    const disabled = el.hasAttribute("disabled");
    const tabindex = el.getAttribute("tabindex");
    const negative = tabindex !== null && parseInt(tabindex, 10) < 0;
    if (hidden || disabled || negative) out.push(el.outerHTML.slice(0, chars));
  }
  return out;
}
"""


class UnfocusableInteractiveCheck:
    key = "unfocusable_interactive"
    title = "Interactive elements unreachable by keyboard"

    async def run(self, session) -> List[str]:
        found = await session.evaluate(UNFOCUSABLE_JS, {
            "selector": INTERACTIVE_SELECTOR,
            "limit": MAX_ENTRIES,
            "chars": MAX_HTML_CHARS,
        })
        return [str(html)[:MAX_HTML_CHARS] for html in (found or [])][:MAX_ENTRIES]
