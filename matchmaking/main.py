import logging

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware

from matchmaking.config import settings
from matchmaking.routers import admin, applications, live, users
from matchmaking.utils.response import create_response, handle_exception
from seed import run_seed

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title=settings.PROJECT_NAME)

# CORS for SPA / API access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Create missing tables and the default admin on startup
@app.on_event("startup")
async def startup_event():
    if settings.SEED_ON_STARTUP:
        run_seed()


# Add routes
app.include_router(users.router)
app.include_router(applications.router)
app.include_router(admin.router)
app.include_router(live.router)


@app.get("/")
def home():
    try:
        return create_response(
            message="Matchmaking API running",
            data={"service": "matchmaking-backend"},
            status_code=status.HTTP_200_OK
        )
    except Exception as exc:
        return handle_exception(exc)
