# headpress/main.py
import logging

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from headpress.api.v1.endpoints import (
    comments,
    discovery,
    health,
    links,
    media,
    moments,
    pages,
    posts,
    settings as site_settings,
    terms,
    users,
)
from headpress.core.config import Settings, settings
from headpress.core.errors import register_exception_handlers
from headpress.core.logging_config import setup_logging
from headpress.db import models_registry  # noqa: F401  (maps every model before first use)
from headpress.services.formatter import API_PREFIX
from headpress.services.settings_cache import SettingsCache, default_settings
from headpress.services.storage import build_object_store
from headpress.services.text_generator import build_text_generator
from headpress.services.webhook import WebhookNotifier
from middleware.request_logging import RequestLoggingMiddleware

logger = logging.getLogger('headpress')

PAGINATION_HEADERS = ['X-WP-Total', 'X-WP-TotalPages', 'Link', 'X-Request-ID']


def create_app(config: Settings = settings) -> FastAPI:
    """
    Builds the application and the collaborators it shares across requests:
    the settings cache, object store, text generator and webhook notifier
    live on `app.state` and reach handlers through dependencies.
    """
    app = FastAPI(
        title=f'{config.SITE_NAME} API',
        description='''
    ## Headless CMS with a WordPress-compatible REST API

    **Collections** under `/wp-json/wp/v2`:
    - **Posts & Pages**: drafts, publishing workflow, trash
    - **Categories & Tags**: taxonomy with live post counts
    - **Comments**: public submissions with moderation
    - **Media**: uploads to S3-compatible storage
    - **Users**: JWT authentication and roles
    - **Links & Moments**: blogroll and short updates
    - **Settings**: site options and webhooks
    ''',
        version='1.0.0',
        openapi_url='/openapi.json',
        docs_url='/docs',
        redoc_url='/redoc',
    )

    app.state.settings_cache = SettingsCache(
        default_settings(config), ttl=config.SETTINGS_CACHE_TTL_SECONDS
    )
    app.state.object_store = build_object_store(config)
    app.state.text_generator = build_text_generator(config)
    app.state.webhook_notifier = WebhookNotifier(timeout=config.WEBHOOK_TIMEOUT_SECONDS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials='*' not in config.CORS_ORIGINS,
        allow_methods=['*'],
        allow_headers=['*'],
        expose_headers=PAGINATION_HEADERS,
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router, tags=['Health Check'])
    app.include_router(discovery.router, tags=['Discovery'])
    app.include_router(users.router, prefix=f'{API_PREFIX}/users', tags=['Users'])
    app.include_router(posts.router, prefix=f'{API_PREFIX}/posts', tags=['Posts'])
    app.include_router(pages.router, prefix=f'{API_PREFIX}/pages', tags=['Pages'])
    app.include_router(terms.categories_router, prefix=f'{API_PREFIX}/categories', tags=['Categories'])
    app.include_router(terms.tags_router, prefix=f'{API_PREFIX}/tags', tags=['Tags'])
    app.include_router(comments.router, prefix=f'{API_PREFIX}/comments', tags=['Comments'])
    app.include_router(media.router, prefix=f'{API_PREFIX}/media', tags=['Media'])
    app.include_router(links.router, prefix=f'{API_PREFIX}/links', tags=['Links'])
    app.include_router(links.category_router, prefix=f'{API_PREFIX}/link-categories', tags=['Links'])
    app.include_router(moments.router, prefix=f'{API_PREFIX}/moments', tags=['Moments'])
    app.include_router(site_settings.router, prefix=f'{API_PREFIX}/settings', tags=['Settings'])

    @app.get('/')
    async def root():
        return {
            'message': f'{config.SITE_NAME} headless CMS',
            'status': 'operational',
            'version': '1.0.0',
            'docs': '/docs',
            'api_root': '/wp-json',
            'namespace': API_PREFIX,
        }

    @app.get('/metrics', include_in_schema=False)
    async def prometheus_metrics():
        """Prometheus exposition."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


def run() -> None:
    """Console entry point: configures logging, then serves the app."""
    import uvicorn

    setup_logging()
    logger.info('Headpress API starting up')
    uvicorn.run(app, host='0.0.0.0', port=8000, log_config=None)


if __name__ == '__main__':
    run()
