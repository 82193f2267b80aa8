import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from showdown import config
from showdown.database import create_db_and_tables, engine
from showdown.errors import ShowdownError
from showdown.routers import admin, matches
from showdown.services.scheduler import scheduler_loop

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info(
        f"CP Showdown ready: start={config.CP_START} per_vote={config.CP_PER_VOTE} "
        f"duration={config.MATCH_DURATION_HOURS}h cutoff={config.EVENT_CUTOFF_SECONDS}s"
    )
    if not config.ADMIN_TOKEN:
        logger.warning("SHOWDOWN_ADMIN_TOKEN not set: admin endpoints will reject every request")

    scheduler_task = None
    if config.SCHEDULER_INTERVAL_SECONDS > 0:
        scheduler_task = asyncio.create_task(
            scheduler_loop(lambda: Session(engine), config.SCHEDULER_INTERVAL_SECONDS)
        )

    yield

    if scheduler_task is not None:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="CP Showdown API", lifespan=lifespan)


@app.exception_handler(ShowdownError)
async def showdown_error_handler(request: Request, exc: ShowdownError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "code": exc.code, "detail": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"ok": False, "code": "InvalidInput", "detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


# Allow CORS from any origin (the bracket front end is served separately)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(matches.router)
app.include_router(admin.router)


@app.get("/health")
def health():
    return {"ok": True}
