"""Low-contrast text sampling.

The page only reports resolved colours; the WCAG luminance math runs here so
every emitted ratio can be recomputed from its hex values.
"""

from typing import Any, Dict, List, Sequence

from a11y_scanner.models.schemas import ContrastPair

MAX_PAIRS = 100

AA_NORMAL = 4.5
THRESHOLDS = (
    ("AA", AA_NORMAL),
    ("AA-large", 3.0),
    ("AAA", 7.0),
)

# Returns {selector, fg: [r,g,b], bg: [r,g,b]} for every visible element that
# owns a non-empty text node. Transparent backgrounds resolve to the first
# opaque ancestor, else white.
CONTRAST_SAMPLE_JS = """
() => {
  const parse = (value) => {
    const m = (value || "").match(/rgba?\\(([^)]+)\\)/);
    if (!m) return null;
    const parts = m[1].split(/[\\s,\\/]+/).filter(Boolean).map(Number);
    if (parts.length < 3 || parts.slice(0, 3).some(Number.isNaN)) return null;
    return { rgb: parts.slice(0, 3).map(Math.round), alpha: parts.length > 3 ? parts[3] : 1 };
  };
  const pathOf = (el) => {
    const segs = [];
    for (let node = el; node && node.nodeType === 1; node = node.parentElement) {
      segs.unshift(node.tagName.toLowerCase() + (node.id ? "#" + node.id : ""));
    }
    return segs.join(" > ");
  };
  const background = (el) => {
    for (let node = el; node && node.nodeType === 1; node = node.parentElement) {
      const bg = parse(getComputedStyle(node).backgroundColor);
      if (bg && bg.alpha > 0) return bg.rgb;
    }
    return [255, 255, 255];
  };
  const samples = [];
  for (const el of document.body ? document.body.querySelectorAll("*") : []) {
    const ownText = Array.from(el.childNodes).some(
      (n) => n.nodeType === 3 && n.textContent.trim().length > 0
    );
    if (!ownText) continue;
    const style = getComputedStyle(el);
    if (style.display === "none" || style.visibility === "hidden") continue;
    if (!(el.offsetWidth || el.offsetHeight || el.getClientRects().length)) continue;
    const fg = parse(style.color);
    if (!fg) continue;
    samples.push({ selector: pathOf(el), fg: fg.rgb, bg: background(el) });
  }
  return samples;
}
"""


def _linear(channel: int) -> float:
    c = channel / 255.0
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: Sequence[int]) -> float:
    r, g, b = (_linear(int(v)) for v in rgb[:3])
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: Sequence[int], bg: Sequence[int]) -> float:
    l1 = relative_luminance(fg)
    l2 = relative_luminance(bg)
    hi, lo = max(l1, l2), min(l1, l2)
    return round((hi + 0.05) / (lo + 0.05), 2)


def to_hex(rgb: Sequence[int]) -> str:
    return "#" + "".join(f"{max(0, min(255, int(v))):02x}" for v in rgb[:3])


def from_hex(value: str) -> List[int]:
    value = value.lstrip("#")
    return [int(value[i:i + 2], 16) for i in (0, 2, 4)]


def thresholds_met(ratio: float) -> List[str]:
    return [name for name, minimum in THRESHOLDS if ratio >= minimum]


def pairs_from_samples(samples: List[Dict[str, Any]], limit: int = MAX_PAIRS) -> List[ContrastPair]:
    pairs: List[ContrastPair] = []
    for sample in samples:
        if len(pairs) >= limit:
            break
        fg, bg = sample.get("fg"), sample.get("bg")
        if not fg or not bg:
            continue
        ratio = contrast_ratio(fg, bg)
        if ratio >= AA_NORMAL:
            continue
        pairs.append(ContrastPair(
            selector=str(sample.get("selector") or ""),
            fg=to_hex(fg),
            bg=to_hex(bg),
            ratio=ratio,
            passes=thresholds_met(ratio),
        ))
    return pairs


class ContrastCheck:
    key = "contrast_pairs"
    title = "Text contrast (WCAG 1.4.3)"

    async def run(self, session) -> List[ContrastPair]:
        samples = await session.evaluate(CONTRAST_SAMPLE_JS)
        return pairs_from_samples(samples or [])
