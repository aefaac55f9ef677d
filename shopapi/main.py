import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from shopapi.core.config import get_settings, validate_runtime_config
from shopapi.database import dispose_engine, init_schema
from shopapi.errors import AuthError
from shopapi.routes import auth_routes

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=['http://localhost:3000'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    validate_runtime_config(get_settings())
    try:
        init_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.on_event('shutdown')
def close_database() -> None:
    dispose_engine()


@app.exception_handler(AuthError)
async def handle_auth_error(_request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'success': False, 'error': exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [str(error.get('msg', '')).removeprefix('Value error, ') for error in exc.errors()]
    return JSONResponse(status_code=400, content={'success': False, 'error': ', '.join(messages)})


@app.get('/')
def root():
    return {'status': 'Shop API Running'}


app.include_router(auth_routes.router, prefix=auth_routes.AUTH_PREFIX)
