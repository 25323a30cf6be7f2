# backend/ostsee/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ostsee.api.routers import admin, auth, export, files, geo, map, report, sightings
from ostsee.config import get_settings
from ostsee.db import init_db
from ostsee.exceptions import OstseeError
from ostsee.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Ostsee Sichtungen API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.public_site_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OstseeError)
async def ostsee_error_handler(request: Request, exc: OstseeError):
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e["loc"][1:]) or str(e["loc"][0]), "message": e["msg"]}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content={
        "success": False,
        "code": "VALIDATION_ERROR",
        "message": "Validierungsfehler bei der Eingabe",
        "errors": errors,
    })


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "success": False,
        "code": "SERVER_ERROR",
        "message": "Ein unbekannter Fehler ist aufgetreten",
    })


@app.get("/health")
def health():
    return {"ok": True}


@app.on_event("startup")
def on_startup():
    init_db()


# export before sightings: "/export" would otherwise match "/{sighting_id}"
app.include_router(export.router,    prefix="/api/sightings/export", tags=["export"])
app.include_router(sightings.router, prefix="/api/sightings",        tags=["sightings"])
app.include_router(admin.router,     prefix="/api/admin",            tags=["admin"])
app.include_router(files.router,     prefix="/api/files",            tags=["files"])
app.include_router(auth.router,      prefix="/api/auth",             tags=["auth"])
app.include_router(geo.router,       prefix="/api/geo",              tags=["geo"])
app.include_router(map.router,       prefix="/api/map",              tags=["map"])
app.include_router(report.router,    prefix="/report",               tags=["report"])

# uploaded media
_upload_dir = settings.resolved_upload_dir
_upload_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.upload_url_base, StaticFiles(directory=str(_upload_dir)), name="uploads")
