from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..payroll.model import WorkPolicy
from .model import WorkSettings

log = logging.getLogger(__name__)


class WorkSettingsService:
    """Process-wide working-hours settings.

    Callers take a ``policy()`` snapshot per request and pass it down, so a
    concurrent settings change never alters a computation already in flight.
    Stored timesheets are never recomputed when settings change.
    """

    def __init__(self, initial: Optional[WorkSettings] = None):
        self._lock = threading.Lock()
        self._settings = initial or WorkSettings()

    def current(self) -> WorkSettings:
        with self._lock:
            return self._settings

    def policy(self) -> WorkPolicy:
        return self.current().policy()

    def get(self, *, current_role: Role) -> WorkSettings:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can view settings")
        return self.current()

    def update(self, *, current_role: Role, data: Mapping[str, Any]) -> WorkSettings:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change settings")
        if not isinstance(data, Mapping):
            raise ValidationError("Settings must be a JSON object")

        with self._lock:
            updated = self._settings.merged(data)
            self._settings = updated

        log.info("Work settings updated: %s", updated.to_dict())
        return updated
