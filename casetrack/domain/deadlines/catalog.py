from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional, Sequence

from casetrack.domain.common.errors import NotFoundError
from casetrack.domain.deadlines.models import ActionTypeDefinition
from casetrack.domain.deadlines.ports import DeadlineStore, IdGenerator
from casetrack.domain.deadlines.rules import validate_action_type_name, validate_duration_days

logger = logging.getLogger(__name__)


class ActionTypeCatalog:
    """Reusable action templates: a standard duration and an auto-pause flag."""

    def __init__(self, store: DeadlineStore, ids: IdGenerator) -> None:
        self._store = store
        self._ids = ids

    async def lookup(self, action_type_id: str) -> ActionTypeDefinition:
        definition = await self._store.get_action_type(action_type_id)
        if definition is None:
            raise NotFoundError(f"Action type {action_type_id} not found.")
        return definition

    @staticmethod
    def derive_due_date(definition: ActionTypeDefinition, reference_date: date) -> date:
        # calendar days; holidays are not subtracted here
        return reference_date + timedelta(days=definition.duration_days)

    async def list_all(self) -> Sequence[ActionTypeDefinition]:
        return await self._store.list_action_types()

    async def register(self, name: str, duration_days: int, affects_delay: bool = False) -> ActionTypeDefinition:
        definition = ActionTypeDefinition(
            action_type_id=self._ids.new_id(),
            name=validate_action_type_name(name),
            duration_days=validate_duration_days(duration_days),
            affects_delay=bool(affects_delay),
        )
        await self._store.save_action_type(definition)
        logger.info("Action type registered: id=%s name=%s", definition.action_type_id, definition.name)
        return definition

    async def update(
        self,
        action_type_id: str,
        name: Optional[str] = None,
        duration_days: Optional[int] = None,
        affects_delay: Optional[bool] = None,
    ) -> ActionTypeDefinition:
        current = await self.lookup(action_type_id)
        updated = replace(
            current,
            name=validate_action_type_name(name) if name is not None else current.name,
            duration_days=validate_duration_days(duration_days) if duration_days is not None else current.duration_days,
            affects_delay=bool(affects_delay) if affects_delay is not None else current.affects_delay,
        )
        await self._store.save_action_type(updated)
        return updated

    async def remove(self, action_type_id: str) -> None:
        await self.lookup(action_type_id)
        await self._store.delete_action_type(action_type_id)
