from typing import Literal, List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field

WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]
Severity = Literal["error", "warning", "info"]
Level = Literal["A", "AA", "AAA"]

# accepted spellings of the navigation readiness condition
WAIT_UNTIL_ALIASES: Dict[str, str] = {
    "load": "load",
    "domcontentloaded": "domcontentloaded",
    "dom-content-loaded": "domcontentloaded",
    "networkidle": "networkidle",
    "network-idle": "networkidle",
    "commit": "commit",
}


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Emulation(_Model):
    color_scheme: Optional[Literal["light", "dark"]] = Field(default=None, alias="colorScheme")
    reduced_motion: Optional[bool] = Field(default=None, alias="reducedMotion")

    def media_kwargs(self) -> Dict[str, str]:
        """Keyword arguments for ``page.emulate_media``; unset fields are left out."""
        kwargs: Dict[str, str] = {}
        if self.color_scheme is not None:
            kwargs["color_scheme"] = self.color_scheme
        if self.reduced_motion is not None:
            kwargs["reduced_motion"] = "reduce" if self.reduced_motion else "no-preference"
        return kwargs


class ScanRequest(_Model):
    url: str
    wait_until: WaitUntil = Field(default="networkidle", alias="waitUntil")
    emulate: Optional[Emulation] = None


class WcagFinding(_Model):
    rule_id: str = Field(alias="ruleId")
    label: str
    code: Optional[str] = None
    level: Level = "A"
    severity: Severity
    location: str
    detail: str


class FocusOrderEntry(_Model):
    index: int
    selector: str
    role: str
    name: str = ""
    visible: bool = True


class ContrastPair(_Model):
    selector: str
    fg: str
    bg: str
    ratio: float
    passes: List[str] = Field(default_factory=list)


class ScanResult(_Model):
    final_url: str = Field(alias="finalUrl")
    axe: Dict[str, Any] = Field(default_factory=dict)
    wcag_findings: List[WcagFinding] = Field(default_factory=list, alias="wcagFindings")
    focus_order: List[FocusOrderEntry] = Field(default_factory=list, alias="focusOrder")
    unfocusable_interactive: List[str] = Field(default_factory=list, alias="unfocusableInteractive")
    contrast_pairs: List[ContrastPair] = Field(default_factory=list, alias="contrastPairs")
    console_errors: List[str] = Field(default_factory=list, alias="consoleErrors")


class ErrorResponse(BaseModel):
    error: str
    message: str
    stack: Optional[str] = None
