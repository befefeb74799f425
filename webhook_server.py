"""
GuidedBook purchase webhook server.

Receives payment events at POST /hotmart-webhook and grants reader access.

Usage:
    HOTMART_WEBHOOK_TOKEN=... python webhook_server.py
    uvicorn webhook_server:app --port 8000
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guidedbook.access import ProfileStore, handle_purchase_webhook
from guidedbook.config import Settings, configure_logging, load_settings


logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/hotmart-webhook"
ACCEPTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: Optional[Settings] = None, profiles: Optional[ProfileStore] = None) -> FastAPI:
    """
    Build the webhook app.

    Args:
        settings: Runtime settings (default: from environment)
        profiles: Profile store (default: opened lazily in the data directory)
    """
    settings = settings or load_settings()
    app = FastAPI(title="GuidedBook webhook")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    stores = {"profiles": profiles}

    def get_profiles() -> ProfileStore:
        if stores["profiles"] is None:
            stores["profiles"] = ProfileStore(settings.accounts_db_path)
        return stores["profiles"]

    # Every method is routed here so non-POST requests get the handler's 405
    @app.api_route(WEBHOOK_PATH, methods=ACCEPTED_METHODS)
    async def hotmart_webhook(request: Request):
        body = (await request.body()).decode("utf-8", errors="replace")
        result = handle_purchase_webhook(
            request.method,
            body,
            dict(request.headers),
            settings.webhook_token,
            get_profiles() if settings.webhook_token else None,
        )
        return JSONResponse(status_code=result.status, content=result.payload)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging(load_settings().log_level)
    uvicorn.run(app, host="0.0.0.0", port=8000)
