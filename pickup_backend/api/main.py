"""
FastAPI app for the pickup backend.

HTTP layer over the application service; business rules live in domain/.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pickup_backend.api.router import router
from pickup_backend.application.config import get_settings
from pickup_backend.logging import setup_logging

settings = get_settings()
setup_logging(json_output=settings.log_json, log_level=settings.log_level)

app = FastAPI(
    title="Pickup API",
    description="Business dates and pickup route assignment for venues",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
def root():
    """Endpoint raíz"""
    return {"message": "Pickup API", "status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)
