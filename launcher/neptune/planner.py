from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List

@dataclass
class PlanAction:
    action: str
    target: str
    detail: str
    paths: Dict[str, str]
    will_change: bool
    severity: str = "info"  # info|warn|error

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass
class Plan:
    realm: str
    actions: List[PlanAction] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(a.severity == "error" for a in self.actions)

    @property
    def errors(self) -> List[PlanAction]:
        return [a for a in self.actions if a.severity == "error"]

    def add(self, action: PlanAction) -> PlanAction:
        self.actions.append(action)
        return action

    def to_dict(self) -> Dict[str, Any]:
        return {
            "realm": self.realm,
            "ok": self.ok,
            "actions": [a.to_dict() for a in self.actions],
            "notes": list(self.notes),
        }
