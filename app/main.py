from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import get_settings
from app.core.logging_config import configure_logging
from app.routers import morning_image

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Morning Picture API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cache-Status", "X-Image-Date"],
)

app.include_router(morning_image.router)


@app.get("/")
def root():
    return {"message": "Morning Picture API", "docs": "/docs"}
