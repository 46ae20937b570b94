"""
Server entry point: FastAPI app setup and route configuration.
Sets up the FastAPI server with CORS and the analyze and health routes.
"""

from __future__ import annotations

import contextlib
import datetime
import os
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import uvicorn
from fastapi.middleware import cors
from starlette import responses

from compliance_scout import config
from compliance_scout.browser import setup
from compliance_scout.models import documents
from compliance_scout.pipeline import scraping
from compliance_scout.utils import errors, logger
from compliance_scout.utils import url as url_mod

dotenv.load_dotenv()

log = logger.create_logger("Server")

HOST = os.environ.get("UVICORN_HOST", "0.0.0.0")
PORT = int(os.environ.get("UVICORN_PORT", "3001"))
IS_PRODUCTION = os.environ.get("ENVIRONMENT", "development") == "production"

_DOCUMENT_FIELDS = {"status", "text", "reason", "source_url", "derived"}


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Check the browser runtime and LLM backend once at start-up."""
    log.section("Compliance Scout Server Started")
    settings = config.ScraperSettings()
    if settings.scraper_mode == "sample":
        runtime = setup.BrowserRuntime(ready=False, detail="Sample mode, browser not used")
    else:
        runtime = await setup.ensure_browser_runtime()
    app.state.settings = settings
    app.state.runtime = runtime
    app.state.extractor = scraping.build_extractor(settings)
    log.info(
        "Server configuration",
        {
            "env": "production" if IS_PRODUCTION else "development",
            "mode": settings.scraper_mode,
            "navigationPolicy": settings.navigation_policy.value,
            "browserReady": runtime.ready,
            "llmConfigured": app.state.extractor.is_configured,
        },
    )
    yield


app = fastapi.FastAPI(title="Compliance Scout Server", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# API Routes
# ============================================================================


def _document_payload(result: documents.DocumentResult | None) -> dict[str, object] | None:
    if result is None:
        return None
    return result.model_dump(by_alias=True, include=_DOCUMENT_FIELDS)


async def _read_url(request: fastapi.Request) -> object:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body.get("url") if isinstance(body, dict) else None


@app.post("/api/analyze")
async def analyze_endpoint(request: fastapi.Request) -> responses.JSONResponse:
    """Find and extract the terms, privacy and cookie documents of a site."""
    url = await _read_url(request)
    if not url:
        return responses.JSONResponse({"error": "URL is required"}, status_code=400)
    if not isinstance(url, str) or not url_mod.is_absolute_http_url(url):
        return responses.JSONResponse({"error": "Invalid URL format"}, status_code=400)

    log.info("Incoming analysis request", {"url": url})
    try:
        result = await scraping.discover_and_extract(
            url,
            settings=request.app.state.settings,
            runtime=request.app.state.runtime,
            extractor=request.app.state.extractor,
        )
    except Exception as exc:
        log.error("Analysis failed", {"url": url, "error": errors.get_error_message(exc)})
        return responses.JSONResponse(
            {"error": "Failed to analyze website", "url": url, "details": str(exc)},
            status_code=500,
        )

    return responses.JSONResponse(
        {
            "url": url,
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            **result.as_texts(),
            "documents": {
                "termsOfService": _document_payload(result.terms_of_service),
                "privacyPolicy": _document_payload(result.privacy_policy),
                "cookiePolicy": _document_payload(result.cookie_policy),
            },
        }
    )


@app.get("/api/health")
async def health_endpoint(request: fastapi.Request) -> dict[str, object]:
    """Report whether the LLM backend and browser runtime are usable."""
    return {
        "status": "ok",
        "llmConfigured": request.app.state.extractor.is_configured,
        "browserReady": request.app.state.runtime.ready,
    }


def main() -> None:
    """Run the server with uvicorn."""
    log.success(f"Server listening on {HOST}:{PORT}")
    uvicorn.run(
        "compliance_scout.app:app",
        host=HOST,
        port=PORT,
        reload=not IS_PRODUCTION,
    )


if __name__ == "__main__":
    main()
