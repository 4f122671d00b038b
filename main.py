import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from routes import excel_export, hello
from utils.errors import ExportError, InvalidRequestError

logger = logging.getLogger(__name__)


async def export_error_handler(request: Request, exc: ExportError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # only locations, the input may hold credentials
    logger.debug(f"Rejected request body at {[e['loc'] for e in exc.errors()]}")
    return await export_error_handler(request, InvalidRequestError())


def create_app() -> FastAPI:
    app = FastAPI(title="SQL Excel Export")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
    )

    app.include_router(hello.router)
    app.include_router(excel_export.router)

    app.add_exception_handler(ExportError, export_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    return app


app = create_app()


def run():
    logging.basicConfig(
        level=config.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=config.get_host(), port=config.get_port())


if __name__ == "__main__":
    run()
