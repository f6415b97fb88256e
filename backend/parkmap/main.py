import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from parkmap import settings
from parkmap.api.routers import auth, districts, parks, facilities, upload
from parkmap.db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Park Map API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials="*" not in settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}


# 初回起動時にDBスキーマを作成
@app.on_event("startup")
def on_startup():
    init_db()

app.include_router(auth.router,       prefix="/auth",       tags=["auth"])
app.include_router(districts.router,  prefix="/districts",  tags=["districts"])
app.include_router(parks.router,      prefix="/parks",      tags=["parks"])
app.include_router(facilities.router, prefix="/facilities", tags=["facilities"])
app.include_router(upload.router,     prefix="/upload",     tags=["upload"])

# /data を静的配信（アップロード写真の取得用）
settings.PHOTOS_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/data", StaticFiles(directory=str(settings.DATA_DIR)), name="data")
