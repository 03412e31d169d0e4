from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from learnpath.routes.auth_routes import auth_routes
from learnpath.routes.profile_routes import profile_routes
from learnpath.routes.assessment_routes import assessment_routes
from learnpath.routes.goal_routes import goal_routes
from learnpath.routes.pathway_routes import pathway_routes
from learnpath.routes.insight_routes import insight_routes
from learnpath.config import create_db, get_settings
from learnpath.services.errors import PathwayError
from learnpath.utils.logger import configure_logging, set_request_id, clear_request_id
from fastapi import Request
from starlette.responses import Response, JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi import HTTPException

app = FastAPI(title="learnpath")
logger = configure_logging()
create_db()
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id"))
    try:
        logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
        response: Response = await call_next(request)
        logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


@app.exception_handler(PathwayError)
async def pathway_error_handler(request: Request, exc: PathwayError) -> JSONResponse:
    logger.warning(
        "domain error type=%s status=%s method=%s path=%s detail=%s",
        type(exc).__name__,
        exc.status_code,
        request.method,
        request.url.path,
        exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Log server-side errors with stack traces; client errors as warnings.
    if exc.status_code >= 500:
        logger.exception("http error status=%s method=%s path=%s detail=\n%s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("http error status=%s method=%s path=%s detail=\n%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("validation error method=%s path=%s errors=\n%s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.get("/")
def read_root():
    return {"message": "learnpath is Healthy"}

app.include_router(auth_routes, prefix="/auth")
app.include_router(profile_routes, prefix="/learner-profile")
app.include_router(assessment_routes, prefix="/assessments")
app.include_router(goal_routes, prefix="/goals")
app.include_router(pathway_routes, prefix="/pathways")
app.include_router(insight_routes, prefix="/insights")

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
