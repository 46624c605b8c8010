from fastapi import FastAPI
from screendiff.config import init_settings

settings = init_settings()
from screendiff.routers.v1.compare import router as compare_router
from screendiff.database import engine
from sqlalchemy import text
import asyncio
import logging

logger = logging.getLogger(__name__)

db_ready = False

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

async def wait_for_db(engine, max_retries: int = 10):
    global db_ready
    delay = 2  # seconds

    for attempt in range(1, max_retries + 1):
        try:
            # Tables are owned by Alembic migrations, only verify the connection
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            db_ready = True
            logger.info("✅ Database connected successfully")
            return
        except Exception as e:
            logger.warning(f"⏳ DB not ready (attempt {attempt}/{max_retries}): {e}")
            await asyncio.sleep(delay)
            delay = min(delay * 2, 30)

    logger.error("❌ Database failed to connect after retries")

@app.on_event("startup")
async def startup():
    asyncio.create_task(wait_for_db(engine))

app.include_router(compare_router, prefix=settings.API_V1_STR, tags=["compare"])

@app.get("/")
async def read_index():
    return {"message": "Screenshot Diff API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

@app.get("/health/db")
async def db_health():
    if db_ready:
        return {"db": "ok"}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"db": "ok"}
    except Exception as e:
        return {"db": "connecting", "detail": str(e) or repr(e)}
