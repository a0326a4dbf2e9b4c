"""Outcome types shared by the ledger, plot rules and use-cases.

Rule functions never raise for business-rule violations. They return a
result carrying the rejection kind plus a message fit for display.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from gardenplots import OwnedPlot, Plant


class Rejection(StrEnum):
    """Every business-rule rejection a visitor can hit."""

    ALREADY_OWNS_PLOT = "already_owns_plot"
    PLOT_OWNED_BY_OTHER = "plot_owned_by_other"
    NO_PLOT = "no_plot"
    INVALID_SQUARE = "invalid_square"
    SQUARE_OCCUPIED = "square_occupied"
    UNKNOWN_SEED = "unknown_seed"
    SEED_IS_FREE = "seed_is_free"
    ALREADY_OWNED = "already_owned"
    SEED_LOCKED = "seed_locked"
    INSUFFICIENT_COINS = "insufficient_coins"
    NOT_FOUND = "not_found"
    ALREADY_HARVESTED = "already_harvested"
    NOT_READY = "not_ready"
    NOT_ADMIN = "not_admin"


@dataclass
class RuleResult:
    """Base result: empty `errors` means the rule passed and was applied."""

    errors: list[str] = field(default_factory=list)
    rejection: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None and not self.errors

    def reject(self, kind: Rejection, message: str) -> "RuleResult":
        self.rejection = kind
        self.errors.append(message)
        return self


@dataclass
class PurchaseResult(RuleResult):
    cost: int = 0
    coins_available: int = 0


@dataclass
class ClaimResult(RuleResult):
    plot: OwnedPlot | None = None


@dataclass
class PlantResult(RuleResult):
    plant_id: str = ""
    plot_asset_id: str = ""
    plant: Plant | None = None


@dataclass
class HarvestResult(RuleResult):
    plant: Plant | None = None
    reward: int = 0
    coins_available: int = 0
    total_coins_earned: int = 0


@dataclass
class UseCaseResult:
    """What a GardenService use-case hands back to the HTTP layer.

    `body` holds the response fields besides `success`.
    """

    body: dict[str, Any] = field(default_factory=dict)
    rejection: Rejection | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.rejection is None

    @classmethod
    def success(cls, **body: Any) -> "UseCaseResult":
        return cls(body=body)

    @classmethod
    def rejected(cls, result: RuleResult) -> "UseCaseResult":
        return cls(rejection=result.rejection, error="; ".join(result.errors))

    @classmethod
    def reject(cls, kind: Rejection, message: str) -> "UseCaseResult":
        return cls(rejection=kind, error=message)
