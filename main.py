import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware

import app.models.all_models  # noqa: F401
from app.core.errors import QuizEngineError, ValidationError
from app.core.logging_config import configure_logging
from app.routes.auth.auth_routers import auth_router
from app.routes.certificate.certificate_routers import certificate_router
from app.routes.quiz.quiz_routers import quiz_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Quiz Attempt & Certification API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(quiz_router)
app.include_router(certificate_router)


@app.exception_handler(QuizEngineError)
async def quiz_engine_error_handler(request: Request, exc: QuizEngineError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    error = ValidationError()
    content = error.to_dict()
    content["errors"] = [
        {"loc": list(item.get("loc", ())), "msg": item.get("msg", "")} for item in exc.errors()
    ]
    return JSONResponse(status_code=error.status_code, content=content)


@app.get("/", response_class=HTMLResponse)
async def read_root():
    return """
    <html>
        <head>
            <title>Quiz API</title>
        </head>
        <body>
            <h1>Quiz Attempt &amp; Certification API</h1>
            <p>See the API documentation <a href="/docs">here</a>.</p>
        </body>
    </html>
    """
