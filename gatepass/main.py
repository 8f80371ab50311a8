from __future__ import annotations

import logging
from typing import Optional

from gatepass.config.logging import setup_logging
from gatepass.config.settings import Settings, settings as default_settings
from gatepass.db.init_db import init_db
from gatepass.db.session import build_session_factory, engine_from_settings
from gatepass.services.service_factory import ServiceFactory

logger = logging.getLogger(__name__)


def bootstrap(cfg: Optional[Settings] = None, *, configure_logging: bool = True) -> ServiceFactory:
    """
    Application factory.

    - Configures logging from Settings.
    - Builds the engine and session factory and creates the tables.
    - Returns the service factory a rendering adapter calls into.
    """
    cfg = cfg or default_settings
    if configure_logging:
        setup_logging(cfg)

    engine = engine_from_settings(cfg)
    # For production, manage the schema with migrations instead
    init_db(engine)

    logger.info(f"{cfg.APP_NAME} ready ({cfg.ENVIRONMENT})")
    return ServiceFactory(build_session_factory(engine))
