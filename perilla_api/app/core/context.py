"""
Application context.

``AppContext`` bundles everything a request handler needs: the
installation config, process settings, the database and the services
bound to it.  It is built explicitly by ``create_app`` (or by the CLI),
initialised on startup and closed on shutdown; handlers reach it
through the ``get_context`` dependency.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from perilla_api.app.core.config import Settings, SystemConfig
from perilla_api.app.core.db import Database
from perilla_api.app.services.access_service import AccessGate
from perilla_api.app.services.entry_service import EntryService
from perilla_api.app.services.entrymap_service import EntryMapService
from perilla_api.app.services.solution_service import SolutionService
from perilla_api.app.services.systemmap_service import SystemMapService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    config: SystemConfig
    settings: Settings
    db: Database
    entries: EntryService = field(init=False)
    entrymaps: EntryMapService = field(init=False)
    systemmaps: SystemMapService = field(init=False)
    solutions: SolutionService = field(init=False)
    gate: AccessGate = field(init=False)

    def __post_init__(self) -> None:
        self.entries = EntryService(self.db)
        self.entrymaps = EntryMapService(self.db)
        self.systemmaps = SystemMapService(self.db)
        self.solutions = SolutionService(self.db)
        self.gate = AccessGate(self.entrymaps, self.systemmaps)

    @classmethod
    def from_config(cls, config: SystemConfig, settings: Optional[Settings] = None) -> "AppContext":
        db = Database(config.database_path(), config.db.options)
        return cls(config=config, settings=settings or Settings(), db=db)

    def init(self) -> None:
        version = self.db.init()
        logger.info("Database ready at %s (schema version %s)", self.db.path, version)

    def close(self) -> None:
        self.db.close()
