import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL
from .database import create_tables
from .error_handlers import register_error_handlers
from .logging_config import REQUEST_ID_HEADER, bind_request, setup_logging
from .routers import auth, dashboard, threads, todos

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL, LOG_FORMAT)
    create_tables()
    logger.info("Todo API started")
    yield
    logger.info("Todo API shutting down")


app = FastAPI(
    title="Todo API",
    description="Multi-user todo list API with chat threads",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(todos.router, prefix="/api", tags=["todos"])
app.include_router(threads.router, prefix="/api", tags=["threads"])
app.include_router(dashboard.router, prefix="/api", tags=["dashboard"])

register_error_handlers(app)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = bind_request(request.headers.get(REQUEST_ID_HEADER))
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.get("/")
def read_root():
    return {"message": "Todo API"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
