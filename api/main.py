import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes.health import router as health_router
from api.db.store import init_store, get_store
from api.routes.user import router as user_router
from api.routes.movies import router as movies_router
from api.routes.swipe import router as swipe_router
from api.routes.matches import router as matches_router
from api.config import CATALOG_TIMEOUT, OMDB_API_KEY, TMDB_API_KEY
from api.core.errors import InvalidUser, PersistenceFailure
from etl.catalog import Catalog
from etl.omdb_client import OMDbClient
from etl.tmdb_client import TMDBClient

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
# Reduce noise from other modules
logging.getLogger("urllib3").setLevel(logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.INFO)

logger = logging.getLogger(__name__)


def build_catalog() -> Catalog | None:
    if not TMDB_API_KEY:
        logger.warning("TMDB_API_KEY is not set; the movie feed will be empty.")
        return None
    omdb = OMDbClient(OMDB_API_KEY, timeout=CATALOG_TIMEOUT) if OMDB_API_KEY else None
    if omdb is None:
        logger.info("OMDB_API_KEY is not set; IMDb / Rotten Tomatoes ratings disabled.")
    return Catalog(TMDBClient(TMDB_API_KEY, timeout=CATALOG_TIMEOUT), omdb)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    _initialise_application(app)
    if getattr(app.state, "catalog", None) is None:
        app.state.catalog = build_catalog()
    yield
    catalog = getattr(app.state, "catalog", None)
    if catalog is not None:
        await catalog.aclose()
        app.state.catalog = None


app = FastAPI(title="Movie Matcher", version="0.1.0", lifespan=app_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(health_router, prefix="")
app.include_router(user_router)
app.include_router(movies_router)
app.include_router(swipe_router)
app.include_router(matches_router)


@app.exception_handler(InvalidUser)
async def _invalid_user_handler(request: Request, exc: InvalidUser):
    return JSONResponse(
        status_code=404, content={"success": False, "detail": "Invalid user"}
    )


@app.exception_handler(PersistenceFailure)
async def _persistence_failure_handler(request: Request, exc: PersistenceFailure):
    return JSONResponse(
        status_code=500,
        content={"success": False, "detail": "Failed to persist state"},
    )


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "detail": "Internal error",
            "endpoint": request.url.path,
        },
    )


def _initialise_application(app: FastAPI) -> None:
    # When tests override get_store we skip touching the state file.
    if get_store in app.dependency_overrides:
        return
    init_store()
