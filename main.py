import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.core.config import settings
from backend.app.utils.global_state import GlobalState, init_resources
from backend.app.api.v1.routers import router as v1_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Voyager Search")

# 1. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2. Routes
app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok"}


# 3. Startup warm-up (singleton initialization)
@app.on_event("startup")
async def startup_event():
    logger.info("System Starting... Initializing Global Resources.")
    init_resources()


@app.on_event("shutdown")
async def shutdown_event():
    await GlobalState.close()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
