import logging
import time

from fastapi import FastAPI, Request

from produto_api.exceptions import generic_exception_handler

logger = logging.getLogger("produto_api.access")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def catch_unhandled(request: Request, call_next):
    """Turn unhandled exceptions into the generic 500 inside the middleware chain."""
    try:
        return await call_next(request)
    except Exception as exc:
        return await generic_exception_handler(request, exc)


async def access_log(request: Request, call_next):
    """Log one line per request: client, method, path, status and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    client = request.client.host if request.client else "-"
    logger.info(
        f'{client} "{request.method} {request.url.path}" '
        f'{response.status_code} {elapsed_ms:.1f}ms "{request.headers.get("user-agent", "-")}"'
    )
    return response


def register_middleware(app: FastAPI) -> None:
    # Registered first, so it sits innermost of the three
    app.middleware("http")(catch_unhandled)
    app.middleware("http")(security_headers)
    app.middleware("http")(access_log)
