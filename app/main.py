import logging

from fastapi import FastAPI

from app.config import settings
from app.api import menu, profile, recommendations

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="EatsAdvisor", version="0.1.0")


# Include routers
app.include_router(profile.router)
app.include_router(menu.router)
app.include_router(recommendations.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
