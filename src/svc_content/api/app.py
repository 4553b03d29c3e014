from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from svc_content.app.core.env import get_env
from svc_content.app.settings import AppSettings, get_app_settings
from svc_content.db.cache import SqlCache
from svc_content.db.engine import DBEngine
from svc_content.db.schema import create_all
from svc_content.db.settings import DBSettings, get_db_settings
from svc_content.mailer import EmailSender, LogSender, ResendSender
from svc_content.storage import LocalStorage, MemoryStorage, ObjectStorage

from .assets import AssetServer
from .context import Environment
from .health import router as health_router
from .middleware import add_session_authentication, add_token_authentication
from .pipeline import Pipeline, PipelineConfig
from .routes import add_documents_routes, add_files_routes, add_sessions_routes, add_verification_routes

logger = logging.getLogger(__name__)


def build_environment(
    app_settings: AppSettings,
    engine: DBEngine,
    *,
    storage: Optional[ObjectStorage] = None,
    mailer: Optional[EmailSender] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Environment:
    if storage is None:
        storage = LocalStorage(app_settings.files_dir) if app_settings.files_dir else MemoryStorage()
    if mailer is None:
        if app_settings.resend_key:
            mailer = ResendSender(
                app_settings.resend_key.get_secret_value(),
                sender=app_settings.email_from,
                client=http_client,
            )
        else:
            mailer = LogSender()
    assets = AssetServer(app_settings.assets_dir) if app_settings.assets_dir else None
    return Environment(
        settings=app_settings,
        db=engine,
        cache=SqlCache(engine),
        storage=storage,
        mailer=mailer,
        assets=assets,
        http=http_client,
    )


def build_pipeline(environment: Environment, config: Optional[PipelineConfig] = None) -> Pipeline:
    """Register resolvers and routes, most specific routes first, then freeze."""
    pipeline = Pipeline(environment, config)

    add_session_authentication(pipeline)
    add_token_authentication(pipeline)
    if environment.settings.bigcommerce_enabled:
        from svc_content.plugins.bigcommerce import add_bigcommerce

        add_bigcommerce(pipeline)

    add_verification_routes(pipeline)
    add_sessions_routes(pipeline)
    add_files_routes(pipeline)
    add_documents_routes(pipeline)
    return pipeline.freeze()


def create_app(
    app_settings: Optional[AppSettings] = None,
    db_settings: Optional[DBSettings] = None,
    *,
    engine: Optional[DBEngine] = None,
    storage: Optional[ObjectStorage] = None,
    mailer: Optional[EmailSender] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    config: Optional[PipelineConfig] = None,
) -> FastAPI:
    app_settings = app_settings or get_app_settings()
    db_settings = db_settings or get_db_settings()
    engine = engine or DBEngine(db_settings)
    owns_http = http_client is None
    http_client = http_client or httpx.AsyncClient(timeout=30.0)

    environment = build_environment(app_settings, engine, storage=storage, mailer=mailer, http_client=http_client)
    pipeline = build_pipeline(environment, config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if db_settings.create_all:
            await create_all(engine.engine)
        url = engine.engine.url
        try:
            sanitized = url.render_as_string(hide_password=True)
        except Exception:
            sanitized = str(url)
        logger.info("DB attached: url=%s driver=%s", sanitized, url.get_backend_name())
        try:
            yield
        finally:
            if owns_http:
                await http_client.aclose()
            await engine.dispose()

    app = FastAPI(
        title=app_settings.name,
        version=app_settings.version,
        docs_url="/_docs",
        redoc_url=None,
        openapi_url="/_openapi.json",
        lifespan=lifespan,
    )
    app.state.db_engine = engine
    app.state.environment = environment
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-last"],
    )
    app.include_router(health_router)
    # Everything else goes through the pipeline's own router.
    app.mount("/", pipeline, name="content")

    logger.info(f"{app_settings.version} version of {app_settings.name} initialized [env: {get_env()}]")
    return app
