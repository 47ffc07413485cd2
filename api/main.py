import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from categories import router as categories_router
from core import settings
from core.db import ConnectionPool
from core.errors import Internal, QuoteServiceError, ValidationError
from core.images import ImageResolver
from core.queries import QueryCatalog
from core.rows import RowMapper
from dispatch.dispatcher import RequestDispatcher
from quotes import router as quotes_router

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Built once per process and injected into the dispatcher.
    catalog = QueryCatalog.from_file(settings.queries_path())
    isolation = settings.isolation_level()

    images = ImageResolver(settings.pictures_dir())
    images.refresh()

    pool = ConnectionPool(settings.pool_settings())
    await pool.open()

    app.state.dispatcher = RequestDispatcher(
        pool,
        catalog,
        RowMapper(images),
        acquire_timeout_s=settings.acquire_timeout_s(),
        isolation=isolation,
    )
    try:
        yield
    finally:
        await pool.close()


app = FastAPI(lifespan=lifespan)


@app.exception_handler(QuoteServiceError)
async def service_error_handler(_: Request, exc: QuoteServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_rejected errors=%s", exc.errors())
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": ValidationError.default_message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error error_type=%s", type(exc).__name__, exc_info=exc)
    return JSONResponse(
        status_code=Internal.status_code,
        content={"error": Internal.default_message},
    )


app.include_router(quotes_router.router, tags=["quotes"])
app.include_router(categories_router.router, tags=["categories"])

# StaticFiles never lists directories; unknown paths are plain 404s.
app.mount(
    "/pictures",
    StaticFiles(directory=settings.pictures_dir(), check_dir=False),
    name="pictures",
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
