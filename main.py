"""
Disposable email verification API.

- POST /v1/verify  { "email": "someone@domain.tld" }
  Checks the domain against a local list of disposable providers, behind a
  per-IP quota of MAX_REQUESTS_PER_DAY requests per 24h.
- GET /status for a simple health check + list size

Run with `disposable-verify`, or
`uvicorn main:build_app --factory --port 3000`.
"""

import logging
import sys
import time
from typing import Sequence

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from api_gate import JsonFileStore, QuotaExceeded, RateLimiter, enforce_quota
from email_checker import DisposableDomains, DomainListError, load_domains
from validation_wrapper import ErrorResponse, verify_email

logger = logging.getLogger(__name__)


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# -------------------------
# App
# -------------------------
def create_app(
    domains: DisposableDomains,
    limiter: RateLimiter,
    trust_proxy: bool = True,
    cors_origins: Sequence[str] = ("*",),
) -> FastAPI:
    app = FastAPI(title="Disposable Email Verify API")
    app.state.domains = domains
    app.state.limiter = limiter
    app.state.trust_proxy = trust_proxy

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(QuotaExceeded)
    async def quota_exceeded(request: Request, exc: QuotaExceeded):
        return JSONResponse(status_code=429, content=ErrorResponse(message=str(exc)).model_dump())

    @app.get("/status")
    async def status():
        return {
            "ok": True,
            "time": int(time.time()),
            "domain_count": len(domains),
        }

    @app.post("/v1/verify", dependencies=[Depends(enforce_quota)])
    async def verify_endpoint(req: Request):
        try:
            payload = await req.json()
        except ValueError:
            # unparseable body is handled like a missing email
            payload = None
        status_code, body = verify_email(payload, domains)
        return JSONResponse(status_code=status_code, content=body)

    return app


def build_app() -> FastAPI:
    """Wire the app from environment config. Exits if the domain list can't load."""
    configure_logging()
    try:
        domains = load_domains(config.DOMAINS_FILE)
    except DomainListError as e:
        logger.critical("Cannot start without a domain list: %s", e)
        sys.exit(1)

    limiter = RateLimiter(JsonFileStore(config.RATE_LIMIT_FILE), max_requests=config.MAX_REQUESTS_PER_DAY)
    return create_app(
        domains,
        limiter,
        trust_proxy=config.TRUST_PROXY,
        cors_origins=config.CORS_ORIGINS,
    )


def run() -> None:
    import uvicorn

    app = build_app()
    logger.info("Server is running on port %s", config.DEFAULT_PORT)
    # client IP resolution is done in api_gate.client_identifier
    uvicorn.run(app, host=config.HOST, port=config.DEFAULT_PORT, proxy_headers=False)


if __name__ == "__main__":
    run()
