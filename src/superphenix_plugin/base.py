"""Abstract interface for backup item actions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .backup import Backup


@dataclass(frozen=True)
class ResourceSelector:
    """Resources an action wants to be called for."""

    included_resources: Sequence[str] = field(default_factory=tuple)

    def matches(self, resource: str) -> bool:
        return "*" in self.included_resources or resource in self.included_resources


@dataclass(frozen=True)
class ResourceIdentifier:
    """Additional item an action asks to be backed up alongside its input."""

    group_resource: str
    namespace: str
    name: str


ExecuteResult = Tuple[Dict[str, Any], List[ResourceIdentifier]]


class BackupItemAction(ABC):
    """Base class for actions managed by :class:`ActionRegistry`."""

    @abstractmethod
    def applies_to(self) -> ResourceSelector:
        """Return the resources this action handles."""

    @abstractmethod
    def execute(self, item: Dict[str, Any], backup: Optional[Backup]) -> ExecuteResult:
        """Return the (possibly modified) item and any additional items."""
