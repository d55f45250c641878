from fastapi import FastAPI

from innovators.config import settings
from innovators.container import build_container
from innovators.logging_config import get_logger, setup_logging
from innovators.routers import cron, slack

setup_logging(settings.log_level)

logger = get_logger("main")

app = FastAPI(
    title="Innovators Circle Bot",
    description="Slack assistant for sharing and finding AI wins",
    version="0.1.0",
)

app.include_router(slack.router)
app.include_router(cron.router)


@app.on_event("startup")
async def start_container() -> None:
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(settings)
        logger.info("Innovators Circle bot started")


@app.on_event("shutdown")
async def stop_container() -> None:
    container = getattr(app.state, "container", None)
    if container is not None:
        await container.close()
        app.state.container = None


@app.get("/health")
async def health():
    return {"status": "ok"}
