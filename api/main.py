import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import db, http
from core.config import cors_origins, load_settings
from core.errors import DatabaseError, NoProvidersError, NotFoundError, ProviderError
from jokes import repository as jokes_repository
from jokes import router as jokes_router
from providers import build_providers
from providers import router as providers_router
from providers.aggregator import JokeAggregator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # One pool and one upstream client per process, passed down explicitly.
    # The pool is opened last so a failed setup never leaks it.
    app.state.pool = None
    client = http.build_async_client(settings)
    try:
        app.state.aggregator = JokeAggregator(
            build_providers(client, jokes_one_api_key=settings.jokes_one_api_key),
            concurrency=settings.fetch_concurrency,
        )
        app.state.pool = await db.init_pool(settings)
        logger.info("startup providers=%s", len(app.state.aggregator.providers))
        yield
    finally:
        await client.aclose()
        await db.close_pool(app.state.pool)
        app.state.pool = None


app = FastAPI(title="jokes-aggregator", lifespan=lifespan)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(NotFoundError)
async def not_found_handler(_: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(NoProvidersError)
async def no_providers_handler(_: Request, exc: NoProvidersError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(ProviderError)
async def provider_error_handler(_: Request, exc: ProviderError) -> JSONResponse:
    logger.warning("provider_error error=%s source=%r", exc.message, exc.source)
    return _error(502, exc.message)


@app.exception_handler(DatabaseError)
async def database_error_handler(_: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("database_error error=%s", exc.message, exc_info=exc.source)
    return _error(500, exc.message)


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cors_origins()),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(jokes_router.router, tags=["jokes"])
app.include_router(providers_router.router, tags=["providers"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "jokes-aggregator"}


@app.get("/db/health")
async def db_health(request: Request) -> dict:
    now = await jokes_repository.database_time(db.get_pool(request))
    return {"database": "connected", "timestamp": now}


@app.get("/")
def root(request: Request) -> dict:
    aggregator = getattr(request.app.state, "aggregator", None)
    providers = aggregator.get_providers() if aggregator is not None else ()
    return {
        "message": "jokes-aggregator api",
        "providers": [
            {
                "name": p.name,
                "base_url": p.base_url,
                "categories_count": len(p.categories),
            }
            for p in providers
        ],
    }
