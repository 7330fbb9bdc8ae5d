import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from huddle.api import admin, auth, channels, dms, messages, users
from huddle.config import settings
from huddle.deps import get_store
from huddle.errors import WorkspaceError
from huddle.services.persistence import autosave, restore, save_snapshot
from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = WorkspaceStore()
    if await restore(store):
        logger.info("Workspace restored from snapshot")
    app.state.store = store
    saver = asyncio.create_task(autosave(store))
    yield
    saver.cancel()
    with suppress(asyncio.CancelledError):
        await saver
    await store.scheduler.shutdown()
    await save_snapshot(store)


app = FastAPI(
    title="Huddle",
    description="Workspace messaging API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkspaceError)
async def workspace_error_handler(request: Request, exc: WorkspaceError):
    logger.debug("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# REST API routes
app.include_router(admin.router)
app.include_router(auth.router)
app.include_router(channels.router)
app.include_router(dms.router)
app.include_router(messages.router)
app.include_router(users.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "huddle"}


@app.delete("/api/clear")
async def clear(store: WorkspaceStore = Depends(get_store)):
    async with store.lock:
        store.reset()
    return {}
