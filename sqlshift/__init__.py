import os

from sqlshift.config import config
from .utils.logger import setup_logger

__version__ = "1.0.0"

# Every configured base directory exists once the package is imported
for _path in config.get('base_dirs', {}).values():
    if _path:
        os.makedirs(_path, exist_ok=True)

setup_logger('sqlshift_init').debug(f'sqlshift {__version__} initialised.')

# ------------------------- FastAPI application ---------------------------

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

_api_cfg = config.get('api', {}) or {}

app = FastAPI(
    title="SQL Server to MySQL Converter API",
    description="Rewrites SQL Server scripts into MySQL syntax and loads them into MySQL.",
    version=str(_api_cfg.get('version', __version__)),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from .api.routes import api_router

app.include_router(api_router)

_route_logger = setup_logger('routes')
for _route in app.routes:
    if hasattr(_route, 'methods'):
        _route_logger.debug(f"{sorted(_route.methods)}  {_route.path}")
