"""
Access resolution for entries.

``AccessGate.resolve`` answers "what may ``caller`` do with entry
``target``?":

* no caller: ``denied``;
* ``forced``: system administrators get ``admin``, everybody else is
  ``denied``.  Entry maps are not looked at in this mode, so a system
  administrator acts on any entry and a plain member cannot use it;
* otherwise the entry map ``caller -> target`` decides: missing means
  ``denied``, present means ``member``, or ``admin`` when its admin
  flag is set.

Nothing is cached; each call reads the store.
"""

import enum
import logging
from typing import Optional

from perilla_api.app.services.entrymap_service import EntryMapService
from perilla_api.app.services.systemmap_service import SystemMapService

logger = logging.getLogger(__name__)


class AccessLevel(str, enum.Enum):
    denied = "denied"
    member = "member"
    admin = "admin"


class AccessGate:
    def __init__(self, entrymaps: EntryMapService, systemmaps: SystemMapService):
        self.entrymaps = entrymaps
        self.systemmaps = systemmaps

    async def is_system_admin(self, caller: Optional[str]) -> bool:
        if not caller:
            return False
        return await self.systemmaps.is_admin(caller)

    async def resolve(self, caller: Optional[str], target: str, forced: bool = False) -> AccessLevel:
        if not caller:
            return AccessLevel.denied
        if forced:
            level = AccessLevel.admin if await self.systemmaps.is_admin(caller) else AccessLevel.denied
        else:
            relation = await self.entrymaps.get_map(caller, target)
            if relation is None:
                level = AccessLevel.denied
            elif relation.admin:
                level = AccessLevel.admin
            else:
                level = AccessLevel.member
        logger.debug("Access of %s to %s (forced=%s): %s", caller, target, forced, level.value)
        return level
