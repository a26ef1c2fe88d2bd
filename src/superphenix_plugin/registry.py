"""Tiny action registry standing in for the Velero plugin server."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .backup import Backup
from .base import BackupItemAction, ExecuteResult


class ActionRegistry:
    """Dispatch backup items to registered actions by name."""

    def __init__(self) -> None:
        self._actions: Dict[str, BackupItemAction] = {}

    def register(self, name: str, action: BackupItemAction) -> None:
        if name in self._actions:
            raise ValueError(f"action '{name}' already registered")
        self._actions[name] = action

    def unregister(self, name: str) -> None:
        self._actions.pop(name, None)

    def get(self, name: str) -> BackupItemAction:
        try:
            return self._actions[name]
        except KeyError:
            raise KeyError(f"no action registered under '{name}'") from None

    def names(self) -> List[str]:
        return list(self._actions)

    def actions_for(self, resource: str) -> List[BackupItemAction]:
        return [a for a in self._actions.values() if a.applies_to().matches(resource)]

    def execute(self, name: str, item: Dict[str, Any], backup: Optional[Backup]) -> ExecuteResult:
        return self.get(name).execute(item, backup)
