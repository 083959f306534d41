import asyncio
import time
from typing import Optional

from fastapi import FastAPI, Request, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from handoff.config import get_settings
from handoff.middleware.body_limit import read_json_body
from handoff.logging_config import logger, setup_logging
from handoff.api.prestart import router as prestart_router
from handoff.services.payload_store import PayloadSweeper, get_payload_store
from handoff.telegram_bot.bot import get_transport, handle_telegram_update, initialize_bot, shutdown_bot
from handoff.telegram_bot.transport import PushTransport, WEBHOOK_PREFIX, select_transport

app = FastAPI(
    title="Inquiry Handoff API",
    description="Booking inquiry intake with Telegram handoff",
    version="0.1.0"
)

_sweeper: Optional[PayloadSweeper] = None

# Strong references to in-flight webhook updates until they finish
_update_tasks: set[asyncio.Task] = set()


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Select transport, start the bot and the token sweeper."""
    global _sweeper

    settings = get_settings()
    setup_logging(settings.log_level)

    transport = select_transport(settings)
    logger.info(f"[STARTUP] Initializing Telegram bot ({type(transport).__name__})...")
    await initialize_bot(transport)

    _sweeper = PayloadSweeper(get_payload_store(), settings.sweep_interval_seconds)
    _sweeper.start()
    logger.info("[STARTUP] Ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the sweeper and the bot transport, giving up after the grace period."""
    settings = get_settings()
    logger.info("[SHUTDOWN] Stopping...")
    try:
        await asyncio.wait_for(_stop_background(), timeout=settings.shutdown_grace_seconds)
    except asyncio.TimeoutError:
        logger.error(f"[SHUTDOWN] Did not finish within {settings.shutdown_grace_seconds}s, exiting anyway")
        return
    logger.info("[SHUTDOWN] Bot stopped")


async def _stop_background() -> None:
    global _sweeper

    if _sweeper is not None:
        await _sweeper.stop()
        _sweeper = None
    await shutdown_bot()


# CORS for the booking site
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.detail})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True}


@app.get("/ping")
async def ping():
    """CORS/method check for the site."""
    return {"ok": True, "ts": int(time.time() * 1000)}


# Telegram webhook endpoint (push mode only)
@app.post(WEBHOOK_PREFIX + "/{hook_id}")
async def telegram_webhook(
    hook_id: str,
    request: Request,
    x_telegram_bot_api_secret_token: str = Header(None)
):
    """
    Webhook endpoint for Telegram updates.

    The path id is random per process; Telegram learns it from setWebhook.
    """
    transport = get_transport()
    if not isinstance(transport, PushTransport) or hook_id != transport.hook_id:
        raise HTTPException(status_code=404, detail="Not Found")

    if not transport.accepts(hook_id, x_telegram_bot_api_secret_token):
        raise HTTPException(status_code=401, detail="Invalid secret token")

    update_data = await read_json_body(request)

    # Handle update in background (fire-and-forget for fast 200 OK)
    task = asyncio.create_task(handle_telegram_update(update_data))
    _update_tasks.add(task)
    task.add_done_callback(_update_tasks.discard)

    return {"ok": True}


app.include_router(prestart_router)


def run() -> None:
    """Serve with uvicorn; shutdown waits at most shutdown_grace_seconds."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    run()
