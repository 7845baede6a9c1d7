import asyncio
import time
import weakref
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from a11y_scanner.core.browser import BrowserSession, ErrorCollector, open_session
from a11y_scanner.core.config import Settings, load_settings
from a11y_scanner.core.errors import (
    AnalysisError,
    InvalidScanRequest,
    NavigationError,
    ScanFailure,
    SessionError,
)
from a11y_scanner.core.logger import get_logger
from a11y_scanner.models.schemas import WAIT_UNTIL_ALIASES, Emulation, ScanRequest, ScanResult
from a11y_scanner.checks.axe import AxeRuleEngine
from a11y_scanner.checks.contrast import ContrastCheck
from a11y_scanner.checks.focus import MAX_STEPS, FocusOrderCheck
from a11y_scanner.checks.unfocusable import UnfocusableInteractiveCheck
from a11y_scanner.checks.wcag import normalize_violations

logger = get_logger(__name__)

MISSING_URL_MESSAGE = "Body must be { url: string }"

# semaphores bind to one event loop; keyed by loop, then by limit
_scan_slots: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()


def scan_slots(limit: int) -> asyncio.Semaphore:
    """Process-wide bound on concurrent browser sessions for the running loop."""
    per_loop = _scan_slots.setdefault(asyncio.get_running_loop(), {})
    if limit not in per_loop:
        per_loop[limit] = asyncio.Semaphore(limit)
    return per_loop[limit]


def parse_scan_request(body: Any) -> ScanRequest:
    """Validate a raw request body without touching the browser."""
    if not isinstance(body, dict):
        raise InvalidScanRequest(MISSING_URL_MESSAGE)
    url = body.get("url")
    if not isinstance(url, str) or not url.strip():
        raise InvalidScanRequest(MISSING_URL_MESSAGE)

    wait = body.get("waitUntil")
    if wait is None:
        wait = "networkidle"
    wait_until = WAIT_UNTIL_ALIASES.get(wait.lower()) if isinstance(wait, str) else None
    if wait_until is None:
        allowed = ", ".join(sorted(set(WAIT_UNTIL_ALIASES)))
        raise InvalidScanRequest(f"waitUntil must be one of: {allowed}", error="invalid_request")

    emulate = body.get("emulate")
    emulation = None
    if isinstance(emulate, dict):
        try:
            emulation = Emulation.model_validate(emulate)
        except ValidationError as e:
            raise InvalidScanRequest(f"invalid emulate options: {e.errors()[0]['msg']}",
                                     error="invalid_request") from e

    return ScanRequest(url=url.strip(), wait_until=wait_until, emulate=emulation)


async def _scan_page(session: BrowserSession, request: ScanRequest, settings: Settings,
                     engine: Any, collector: ErrorCollector) -> ScanResult:
    if request.emulate is not None:
        media = request.emulate.media_kwargs()
        if media:
            try:
                await session.emulate_media(**media)
            except Exception as e:
                raise SessionError(f"media emulation failed: {e}") from e

    try:
        await session.goto(request.url, request.wait_until, settings.nav_timeout_ms)
    except Exception as e:
        raise NavigationError(f"navigation to {request.url} failed: {e}") from e
    logger.info("page loaded", final_url=session.url)

    try:
        axe = await engine.run(session)
        # static DOM reads first; the focus walk moves focus around
        contrast_pairs = await ContrastCheck().run(session)
        unfocusable = await UnfocusableInteractiveCheck().run(session)
        focus_order = await FocusOrderCheck(min(settings.focus_max_steps, MAX_STEPS)).run(session)
        findings = normalize_violations(axe.get("violations") or [])
        return ScanResult(
            final_url=session.url,
            axe=axe,
            wcag_findings=findings,
            focus_order=focus_order,
            unfocusable_interactive=unfocusable,
            contrast_pairs=contrast_pairs,
            console_errors=list(collector.messages),
        )
    except ScanFailure:
        raise
    except Exception as e:
        raise AnalysisError(f"analysis failed: {e}") from e


async def run_scan(
    request: Union[ScanRequest, Dict[str, Any]],
    settings: Optional[Settings] = None,
    *,
    session_factory: Optional[Callable[[ErrorCollector], Any]] = None,
    rule_engine: Any = None,
    slots: Optional[asyncio.Semaphore] = None,
) -> ScanResult:
    """Scan one URL in a fresh browser session.

    The session is released on every exit path. Anything that goes wrong once
    the browser is involved surfaces as a ScanFailure subclass. ``slots``
    bounds concurrent sessions; without it a per-loop semaphore sized by
    ``settings.max_concurrent_scans`` is used.
    """
    if not isinstance(request, ScanRequest):
        request = parse_scan_request(request)
    settings = settings or load_settings()
    factory = session_factory or open_session
    engine = rule_engine or AxeRuleEngine(settings.axe_script_url, settings.axe_script_path)
    collector = ErrorCollector()

    started = time.perf_counter()
    logger.info("scan started", url=request.url, wait_until=request.wait_until)
    try:
        async with slots or scan_slots(settings.max_concurrent_scans):
            async with factory(collector) as session:
                result = await _scan_page(session, request, settings, engine, collector)
    except ScanFailure as e:
        logger.warning("scan failed", url=request.url, kind=type(e).__name__, error=str(e),
                       duration_ms=(time.perf_counter() - started) * 1000)
        raise
    except Exception as e:
        logger.error("scan failed", url=request.url, kind=type(e).__name__, error=str(e))
        raise SessionError(f"browser session failed: {e}") from e

    logger.info(
        "scan completed",
        url=request.url,
        final_url=result.final_url,
        violations=len(result.wcag_findings),
        focus_stops=len(result.focus_order),
        unfocusable=len(result.unfocusable_interactive),
        contrast_pairs=len(result.contrast_pairs),
        console_errors=len(result.console_errors),
        duration_ms=(time.perf_counter() - started) * 1000,
    )
    return result
