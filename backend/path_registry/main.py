"""Registry entry point — composition root for a host process.

Reads Settings once, configures logging from log_level / log_format, and returns
a ready RegistryService (restored from storage when persist is on).
"""

import logging

from path_registry.config import Settings, get_settings
from path_registry.infrastructure.observability import setup_logging
from path_registry.services.registry_service import RegistryService

logger = logging.getLogger(__name__)


def create_service(settings: Settings | None = None) -> RegistryService:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    service = RegistryService.from_settings(settings)
    logger.info(
        f"Path registry ready (persist={settings.persist}, "
        f"max_paths={service.registry.state.max_paths})",
        extra={"operation": "startup"},
    )
    return service
