import httpx
from contextlib import asynccontextmanager

DEFAULT_UA = (
    "A11ySiteScanner/1.0 "
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

TIMEOUT = httpx.Timeout(20.0, connect=5.0)
HEADERS = {"User-Agent": DEFAULT_UA, "Accept": "*/*"}

@asynccontextmanager
async def client_for(transport: httpx.AsyncBaseTransport | None = None):
    async with httpx.AsyncClient(
        timeout=TIMEOUT,
        headers=HEADERS,
        follow_redirects=True,
        http2=transport is None,
        verify=True,
        transport=transport,
    ) as client:
        yield client
