import re
from typing import Any, Dict, Iterable, List, Optional

from a11y_scanner.models.schemas import WcagFinding

# "wcag131" -> success criterion 1.3.1
SC_TAG = re.compile(r"^wcag(\d{3,4})$")
# "wcag2a", "wcag21aa", "wcag2aaa" -> conformance level
LEVEL_TAG = re.compile(r"^wcag\d*(a{1,3})$")
LEVELS = ("A", "AA", "AAA")

SEVERITY_BY_IMPACT = {
    "critical": "error",
    "serious": "error",
    "moderate": "warning",
}


def criterion_code(tags: Iterable[str]) -> Optional[str]:
    for tag in tags:
        m = SC_TAG.match(str(tag).lower())
        if m:
            return ".".join(m.group(1))
    return None


def conformance_level(tags: Iterable[str]) -> str:
    """Strictest level among the level tags, "A" when there are none."""
    found = ["A"]
    for tag in tags:
        m = LEVEL_TAG.match(str(tag).lower())
        if m:
            found.append(m.group(1).upper())
    return max(found, key=LEVELS.index)


def severity_for(impact: Optional[str]) -> str:
    return SEVERITY_BY_IMPACT.get((impact or "").lower(), "info")


def _flatten(target: Any) -> List[str]:
    # axe nests selectors for iframes and shadow roots
    if isinstance(target, (list, tuple)):
        out: List[str] = []
        for part in target:
            out.extend(_flatten(part))
        return out
    return [str(target)] if target not in (None, "") else []


def to_wcag_finding(violation: Dict[str, Any]) -> WcagFinding:
    """Map one axe violation onto a WcagFinding; only the first node is used."""
    rule_id = str(violation.get("id") or "")
    tags = violation.get("tags") or []
    code = criterion_code(tags)
    level = conformance_level(tags)

    nodes = violation.get("nodes") or []
    first = nodes[0] if nodes else {}
    selectors = _flatten(first.get("target"))
    location = ", ".join(selectors) if selectors else rule_id

    detail = next(
        (
            text
            for text in (
                first.get("failureSummary"),
                violation.get("help"),
                violation.get("description"),
                rule_id,
            )
            if text
        ),
        "",
    )

    return WcagFinding(
        rule_id=rule_id,
        label=f"WCAG {code or 'Unmapped'} ({level})",
        code=code,
        level=level,
        severity=severity_for(violation.get("impact")),
        location=location,
        detail=detail,
    )


def normalize_violations(violations: Iterable[Dict[str, Any]]) -> List[WcagFinding]:
    return [to_wcag_finding(v) for v in violations]
