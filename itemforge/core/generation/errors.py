"""Generation error taxonomy"""

from __future__ import annotations


class ConfigurationError(Exception):
    """Invalid rarity/kind/level or malformed generation data.

    Always reported to the immediate caller. Never substituted with a default.
    """


class ExhaustionWarning(UserWarning):
    """Eligible affix pool smaller than the requested affix count.

    Attached to the generated item as metadata, never raised.
    """

    def __init__(self, kind: str, rarity: int, requested: int, available: int) -> None:
        self.kind = kind
        self.rarity = rarity
        self.requested = requested
        self.available = available
        super().__init__(
            f"affix pool exhausted for {kind}/rank {rarity}: "
            f"requested {requested}, only {available} eligible"
        )

    @property
    def message(self) -> str:
        return str(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExhaustionWarning):
            return NotImplemented
        return (self.kind, self.rarity, self.requested, self.available) == (
            other.kind,
            other.rarity,
            other.requested,
            other.available,
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.rarity, self.requested, self.available))

    def __deepcopy__(self, memo: dict) -> "ExhaustionWarning":
        return ExhaustionWarning(self.kind, self.rarity, self.requested, self.available)
