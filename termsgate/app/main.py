"""FastAPI application bootstrap for termsgate."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import requests
from fastapi import FastAPI

from .config import GateConfig
from .infra.db import init_db
from .routers import required_actions, users
from .services.required_action import ExternalTermsProvider


def create_app(
    config: Optional[GateConfig] = None,
    http: Optional[requests.Session] = None,
) -> FastAPI:
    """Build the application.

    ``config`` defaults to the environment; ``http`` to a fresh
    ``requests.Session`` owned (and closed) by the application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=logging.INFO)
        init_db()
        owns_http = http is None
        session = http if http is not None else requests.Session()
        provider = ExternalTermsProvider(session)
        provider.init(config)
        app.state.terms_provider = provider
        try:
            yield
        finally:
            provider.close()
            if owns_http:
                session.close()

    app = FastAPI(title="termsgate API", version="0.1.0", lifespan=lifespan)

    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(
        required_actions.router,
        prefix="/required-actions",
        tags=["required-actions"],
    )

    return app


app = create_app()
