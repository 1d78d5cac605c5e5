# -------------------------------------------------------------
# Itinerary Planner: FastAPI application
# -------------------------------------------------------------
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from itinerary_planner import __version__
from itinerary_planner.api.itinerary_router import router as itinerary_router
from itinerary_planner.config import ItineraryPlannerConfig, config, warn_if_llm_unconfigured
from itinerary_planner.utils.error_handling import HTTP_BAD_REQUEST, ItineraryPlannerError
from itinerary_planner.utils.logging import get_logger, is_logging_configured, setup_logging
from itinerary_planner.utils.rate_limiting import initialize_rate_limiting

logger = get_logger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    return "Invalid itinerary request: " + "; ".join(parts)


def create_app(cfg: ItineraryPlannerConfig | None = None, rate_limits: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        cfg: Configuration to serve with (defaults to the global config)
        rate_limits: Register default limits for services that have none yet
    """
    cfg = cfg or config
    # Keep sinks and levels the CLI already installed
    if not is_logging_configured():
        setup_logging(cfg.system.log_level)

    app = FastAPI(
        title="Itinerary Planner",
        description="Streams AI travel itineraries grounded in real travel data",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(itinerary_router)

    # ---------------------------------------------------------
    # Error responses share the {"error": "..."} shape
    # ---------------------------------------------------------
    @app.exception_handler(ItineraryPlannerError)
    async def planner_error_handler(request: Request, exc: ItineraryPlannerError):
        logger.warning(f"{request.url.path} failed ({exc.status_code}): {exc.message}")
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _format_validation_errors(exc)
        logger.warning(f"{request.url.path} rejected: {message}")
        return JSONResponse({"error": message}, status_code=HTTP_BAD_REQUEST)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    if rate_limits:
        initialize_rate_limiting(overwrite=False)
    warn_if_llm_unconfigured(cfg)

    return app


app = create_app()
