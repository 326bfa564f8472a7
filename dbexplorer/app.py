# dbexplorer/app.py
import time
from contextlib import asynccontextmanager

# Load .env BEFORE any dbexplorer imports (they read env vars at import time)
from dotenv import load_dotenv
load_dotenv(override=True)

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from dbexplorer import monitoring
from dbexplorer import router
from dbexplorer import db as dbmod
from dbexplorer.errors import ExplorerError

GATEWAY_METHODS = ["GET", "PUT", "POST", "DELETE", "PATCH", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # The pool lives as long as the process; never closed per request
    dbmod.dispose()


app = FastAPI(title="DB Explorer", lifespan=lifespan)


# ---------------------------------------------------------------------------
# Metrics middleware
# ---------------------------------------------------------------------------
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    method = request.method
    status = "500"
    try:
        response = await call_next(request)
        status = str(response.status_code)
        return response
    except Exception:
        monitoring.logger.exception("Unhandled exception in request", extra={"path": request.url.path})
        raise
    finally:
        operation = getattr(request.state, "operation", "ops")
        monitoring.observe_request(start, operation, method, status)


# ---------------------------------------------------------------------------
# Error envelope: everything non-2xx is {"error": "..."}
# ---------------------------------------------------------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail).lower()})


# ---------------------------------------------------------------------------
# Operational endpoints (under /-/ so they never shadow a table name)
# ---------------------------------------------------------------------------
@app.get("/-/health")
async def health():
    return {"status": "ok"}


@app.get("/-/metrics")
async def metrics():
    if not monitoring.PROMETHEUS_ENABLED:
        return PlainTextResponse("Prometheus disabled", status_code=404)
    payload, content_type = monitoring.prometheus_metrics_response()
    return Response(content=payload, media_type=content_type)


# ---------------------------------------------------------------------------
# Table gateway
# ---------------------------------------------------------------------------
@app.api_route("/{path:path}", methods=GATEWAY_METHODS)
async def table_gateway(path: str, request: Request):
    """
    GET /, GET|PUT /{table}, GET|POST|DELETE /{table}/{id}
    """
    method = request.method
    operation = router.describe(method, path)
    request.state.operation = operation
    monitoring.logger.info("Received request", extra={"method": method, "path": path, "operation": operation})

    body = await request.body()
    try:
        # Handlers block on the database; run them off the event loop
        content = await run_in_threadpool(router.dispatch, method, path, request.query_params, body)
    except ExplorerError as e:
        monitoring.inc_operation(operation, "error")
        return JSONResponse(status_code=e.status_code, content=e.to_body())
    except Exception:
        monitoring.inc_operation(operation, "error")
        monitoring.logger.exception("Unexpected error in table gateway", extra={"path": path})
        return JSONResponse(status_code=500, content={"error": "internal server error"})

    monitoring.inc_operation(operation, "success")
    return JSONResponse(status_code=200, content=content)
