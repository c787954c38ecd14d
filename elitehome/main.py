# elitehome/main.py
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from elitehome.routers import admin, auth, chat, customer, employees, gallery, quotes
from elitehome.db.mongo import client, ensure_indexes, verify_mongodb_connection
from elitehome.core.config import settings
from elitehome.core.logger import logger
from elitehome.utils.responses import format_error_response


app = FastAPI(
    title="Elite Home Painters",
    version="0.1.0",
    description="Backend for the Elite Home Painters website, customer portal and back-office",
)

# ✅ CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ✅ Startup/shutdown
@app.on_event("startup")
async def startup():
    await verify_mongodb_connection()
    await ensure_indexes()
    logger.info("Elite Home Painters API is live.")

@app.on_event("shutdown")
async def shutdown_db():
    client.close()

# ✅ Health check
@app.get("/", tags=["root"], summary="Health check")
async def root():
    return {"status": "ok", "service": "Elite Home Painters"}

# ✅ Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(exc, status_code=exc.status_code),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=format_error_response(exc, status_code=422),
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content=format_error_response(exc),
    )

# ✅ Routes
app.include_router(auth.router,      prefix="/auth")
app.include_router(admin.router,     prefix="/admin")
app.include_router(employees.router, prefix="/admin/employees")
app.include_router(customer.router,  prefix="/customer")
app.include_router(quotes.router,    prefix="/quote")
app.include_router(chat.router,      prefix="/chat")
app.include_router(gallery.router)

app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
