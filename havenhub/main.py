import logging

from fastapi import FastAPI, Request, Response  # Core FastAPI imports
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from havenhub.api.routes_ai import router_ai
from havenhub.api.routes_auth import router_auth
from havenhub.api.routes_favorites import router_favorites
from havenhub.api.routes_properties import router as properties_router
from havenhub.api.routes_user import router_user
from havenhub.core.config import get_settings
from havenhub.core.errors import InsightRateLimited, InvalidDocumentPath, UpstreamError

logger = logging.getLogger("haven.api")

app = FastAPI(title="Student Haven Hub API", version="0.1.0")  # Main ASGI app

# CORS wide-open: the browser frontend is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root_index():
    return {"message": "Student Haven Hub Backend is running"}


@app.get("/health")
async def health():
    return {"status": "ok"}  # Basic liveness


app.include_router(properties_router)
app.include_router(router_favorites)
app.include_router(router_user)
app.include_router(router_auth)
app.include_router(router_ai)


@app.exception_handler(InsightRateLimited)
async def insight_ratelimit_handler(request: Request, exc: InsightRateLimited):
    content = {"detail": "Too many requests. Please wait a moment before trying again."}
    if exc.retry_delay:
        content["retryDelay"] = exc.retry_delay
    return JSONResponse(status_code=429, content=content)


@app.exception_handler(InvalidDocumentPath)
async def invalid_path_handler(request: Request, exc: InvalidDocumentPath):
    logger.info("invalid_document_id path=%s segment=%r", request.url.path, exc.segment)
    return JSONResponse(status_code=400, content={"detail": "invalid_document_id"})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error("unhandled_upstream_error path=%s service=%s status=%s", request.url.path, exc.service, exc.status_code)
    return JSONResponse(status_code=502, content={"detail": f"{exc.service}_upstream_error"})


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
