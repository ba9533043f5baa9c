import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from dispatcher import InquiryDispatcher
from errors import InquiryError, PolicyError, TransportError
from keepalive import KeepAlivePinger
from logging_config import setup_logging
from mailer import SmtpMailer
from models.dispatch_result import DispatchResult
from models.inquiry import InquiryPayload
from ratelimit import FixedWindowRateLimiter, client_ip

setup_logging()
log = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    if not (settings.EMAIL_USER and settings.EMAIL_PASS) and not settings.EMAIL_DRY_RUN:
        log.warning("EMAIL_USER / EMAIL_PASS not set; sends will fail")
    if pinger:
        pinger.start()
    yield
    if pinger:
        await pinger.stop()


# Initialize FastAPI app
app = FastAPI(title="Inquiry Mailer API", lifespan=lifespan)

# Mail transport is built once and shared by every request
transport = SmtpMailer.from_settings(settings)
dispatcher = InquiryDispatcher(
    transport,
    operator_email=settings.OPERATOR_EMAIL,
    sender=settings.EMAIL_USER or settings.OPERATOR_EMAIL,
    brand_name=settings.BRAND_NAME,
    send_confirmation=settings.SEND_CLIENT_CONFIRMATION,
)

limiter = FixedWindowRateLimiter(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS)

pinger: Optional[KeepAlivePinger] = None
if settings.KEEP_ALIVE_URL:
    pinger = KeepAlivePinger(settings.KEEP_ALIVE_URL, settings.KEEP_ALIVE_INTERVAL_SECONDS)


def get_dispatcher() -> InquiryDispatcher:
    return dispatcher


def error_response(exc: InquiryError, headers: Optional[dict] = None) -> JSONResponse:
    detail = None
    if isinstance(exc, TransportError) and not settings.is_production:
        detail = str(exc)
    body = DispatchResult.failure(exc.public_message, detail=detail).to_body()
    return JSONResponse(body, status_code=exc.status_code, headers=headers)


# Middleware: registered innermost first, so the origin gate runs before
# CORS headers and the rate limiter.
@app.middleware("http")
async def send_email_rate_limit(request: Request, call_next):
    if request.method != "POST" or request.url.path.rstrip("/") != "/send-email":
        return await call_next(request)

    key = client_ip(request, trust_proxy=settings.TRUST_PROXY)
    if not limiter.hit(key):
        log.warning("Rate limit exceeded for %s", key)
        return JSONResponse(
            {"success": False, "error": "Too many requests, please try again later."},
            status_code=429,
            headers={"Retry-After": str(limiter.retry_after(key))},
        )
    return await call_next(request)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def origin_gate(request: Request, call_next):
    origin = request.headers.get("origin")
    if origin and not settings.allow_any_origin and origin not in settings.ALLOWED_ORIGINS:
        log.warning("Blocked request from origin %s to %s", origin, request.url.path)
        return error_response(PolicyError(origin))
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    log.warning("Invalid request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse({"success": False, "error": "Invalid request body"}, status_code=400)


# Health check endpoints
@app.get("/")
async def root():
    return {"status": "Server is running", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/send-email")
async def send_email(request: InquiryPayload, dispatcher: InquiryDispatcher = Depends(get_dispatcher)):
    try:
        result = await dispatcher.dispatch(request)
    except InquiryError as e:
        if isinstance(e, TransportError):
            log.error("Email send error: %s", e)
        return error_response(e)
    except Exception:
        log.exception("Server error while handling inquiry")
        return JSONResponse({"success": False, "error": "Internal server error"}, status_code=500)

    return result.to_body()


# Entry point for Render deployment
if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
