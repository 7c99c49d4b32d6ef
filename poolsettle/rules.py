"""Rule tables and prize configuration passed explicitly into every engine call."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .errors import ConfigurationError


def _require_non_negative_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")


def _to_percent(value: Any) -> Decimal:
    """Convert ``value`` to a ``Decimal`` percentage in ``[0, 100]``."""

    if isinstance(value, bool):
        raise ConfigurationError(f"admin_fee_percent must be numeric, got {value!r}")
    try:
        percent = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigurationError(
            f"admin_fee_percent must be numeric, got {value!r}"
        ) from exc
    if not percent.is_finite():
        raise ConfigurationError(f"admin_fee_percent must be finite, got {value!r}")
    if percent < 0 or percent > 100:
        raise ConfigurationError(
            f"admin_fee_percent must be between 0 and 100, got {percent}"
        )
    return percent


@dataclass(frozen=True)
class ScoringRules:
    """Point values per outcome tier.

    Attributes
    ----------
    exact : int
        Points for guessing both scores exactly.
    correct_outcome : int
        Points for the right result category (home win, draw, away win).
    correct_difference : Optional[int], default: None
        Optional middle tier for the right result category *and* the right
        goal difference. Disabled when ``None``.
    choice : int, default: 1
        Points for a correct answer on a single-choice fixture.

    A wrong guess always scores 0.
    """

    exact: int
    correct_outcome: int
    correct_difference: Optional[int] = None
    choice: int = 1

    wrong: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        _require_non_negative_int("exact", self.exact)
        _require_non_negative_int("correct_outcome", self.correct_outcome)
        _require_non_negative_int("choice", self.choice)
        if self.choice == 0:
            raise ConfigurationError("choice points must be positive")
        if self.exact <= self.correct_outcome:
            raise ConfigurationError(
                "exact points must be greater than correct_outcome points"
            )
        if self.correct_difference is not None:
            _require_non_negative_int("correct_difference", self.correct_difference)
            if not self.exact > self.correct_difference > self.correct_outcome:
                raise ConfigurationError(
                    "correct_difference points must lie strictly between "
                    "correct_outcome and exact points"
                )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScoringRules":
        try:
            return cls(
                exact=data["exact"],
                correct_outcome=data["correct_outcome"],
                correct_difference=data.get("correct_difference"),
                choice=data.get("choice", 1),
            )
        except KeyError as exc:
            raise ConfigurationError(f"scoring rules missing key {exc.args[0]!r}") from exc

    def to_mapping(self) -> dict[str, Any]:
        return {
            "exact": self.exact,
            "correct_outcome": self.correct_outcome,
            "correct_difference": self.correct_difference,
            "choice": self.choice,
        }


@dataclass(frozen=True)
class DrawRules:
    """Independently toggleable knockout pairing rules."""

    cross_group: bool = True
    avoid_same_group: bool = True
    balance: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DrawRules":
        return cls(
            cross_group=bool(data.get("cross_group", True)),
            avoid_same_group=bool(data.get("avoid_same_group", True)),
            balance=bool(data.get("balance", True)),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "cross_group": self.cross_group,
            "avoid_same_group": self.avoid_same_group,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class RoundConfig:
    """Prize configuration of a single round.

    Amounts are integers in the smallest currency unit.
    """

    entry_fee: int
    admin_fee_percent: Decimal
    previous_accumulated: int = 0
    allow_draws: bool = True

    def __post_init__(self) -> None:
        _require_non_negative_int("entry_fee", self.entry_fee)
        _require_non_negative_int("previous_accumulated", self.previous_accumulated)
        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(
            self, "admin_fee_percent", _to_percent(self.admin_fee_percent)
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RoundConfig":
        try:
            return cls(
                entry_fee=data["entry_fee"],
                admin_fee_percent=data.get("admin_fee_percent", 0),
                previous_accumulated=data.get("previous_accumulated", 0),
                allow_draws=bool(data.get("allow_draws", True)),
            )
        except KeyError as exc:
            raise ConfigurationError(f"round config missing key {exc.args[0]!r}") from exc


@dataclass(frozen=True)
class RuleSet:
    """Versioned bundle of every product rule the engine consumes."""

    version: str
    scoring: ScoringRules
    draw: DrawRules = field(default_factory=DrawRules)
    qualifiers_per_group: int = 2

    def __post_init__(self) -> None:
        if not isinstance(self.version, str) or not self.version.strip():
            raise ConfigurationError("rule set version must be a non-empty string")
        _require_non_negative_int("qualifiers_per_group", self.qualifiers_per_group)
        if self.qualifiers_per_group < 1:
            raise ConfigurationError("qualifiers_per_group must be at least 1")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RuleSet":
        """Build a rule set from a plain mapping (e.g. decoded JSON)."""

        if "scoring" not in data:
            raise ConfigurationError("rule set is missing the 'scoring' table")
        return cls(
            version=str(data.get("version", "")),
            scoring=ScoringRules.from_mapping(data["scoring"]),
            draw=DrawRules.from_mapping(data.get("draw") or {}),
            qualifiers_per_group=data.get("qualifiers_per_group", 2),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "scoring": self.scoring.to_mapping(),
            "draw": self.draw.to_mapping(),
            "qualifiers_per_group": self.qualifiers_per_group,
        }


__all__ = [
    "DrawRules",
    "RoundConfig",
    "RuleSet",
    "ScoringRules",
]
