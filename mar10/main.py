import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mar10.database import init_db
from mar10.routes import bracket, groups, races, tournaments

load_dotenv()

app = FastAPI(title="Mar10 Cup API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(groups.router, prefix="/api", tags=["groups"])
app.include_router(races.router, prefix="/api", tags=["races"])

# Bracket generation + result entry (result entry triggers advancement)
app.include_router(bracket.router, prefix="/api", tags=["bracket"])


@app.on_event("startup")
def on_startup():
    init_db()  # Use centralized init_db() which imports models and creates tables


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify the API is up"""
    return {"app_name": "Mar10 Cup API", "status": "healthy"}
