"""axe-core rule engine.

The axe bundle is loaded once per process, from a local file when
A11Y_AXE_SCRIPT_PATH is set, otherwise over HTTP, then injected into each
page before ``axe.run``.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from a11y_scanner.core.http import client_for
from a11y_scanner.core.logger import get_logger

logger = get_logger(__name__)

AXE_RUN_JS = """
async () => {
  if (!window.axe) throw new Error("axe-core was not injected");
  const results = await window.axe.run(document);
  return JSON.parse(JSON.stringify(results));
}
"""

_source: Optional[str] = None
_lock = asyncio.Lock()


async def load_axe_source(url: str, path: Optional[str] = None,
                          transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    global _source
    async with _lock:
        if _source is not None:
            return _source
        if path:
            text = Path(path).read_text(encoding="utf-8")
            logger.info("axe-core loaded", source=path, size=len(text))
        else:
            async with client_for(transport) as client:
                r = await client.get(url)
                r.raise_for_status()
                text = r.text
            logger.info("axe-core fetched", source=url, size=len(text))
        _source = text
        return _source


def reset_axe_cache() -> None:
    global _source
    _source = None


class AxeRuleEngine:
    key = "axe"
    title = "axe-core rule engine"

    def __init__(self, script_url: str, script_path: Optional[str] = None):
        self.script_url = script_url
        self.script_path = script_path

    async def run(self, session) -> Dict[str, Any]:
        source = await load_axe_source(self.script_url, self.script_path)
        await session.add_script(source)
        results = await session.evaluate(AXE_RUN_JS)
        return results or {}
