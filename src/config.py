import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from errors import LedgerError, LedgerErrorKind

ALL_KINDS = "all"


@dataclass(frozen=True)
class EngineConfig:
    """
    Runtime options for PaymentsEngine.

    fatal_errors lists the rejection kinds that abort the run. By default every
    rejection is logged and skipped so processing continues with the next row.
    """

    fatal_errors: FrozenSet[LedgerErrorKind] = field(default_factory=frozenset)
    log_level: int = logging.WARNING

    def is_fatal(self, error: LedgerError) -> bool:
        return error.kind in self.fatal_errors

    @classmethod
    def from_kind_names(cls, names: Iterable[str], verbose: bool = False) -> "EngineConfig":
        """Build a config from CLI-style kind names such as 'insufficient_funds' or 'all'."""
        kinds = set()
        for name in names:
            name = name.strip().lower()
            if name == ALL_KINDS:
                kinds.update(LedgerErrorKind)
                continue
            try:
                kinds.add(LedgerErrorKind(name))
            except ValueError:
                valid = ", ".join([ALL_KINDS] + [kind.value for kind in LedgerErrorKind])
                raise ValueError(f"unknown error kind {name!r} (expected one of: {valid})") from None

        return cls(
            fatal_errors=frozenset(kinds),
            log_level=logging.INFO if verbose else logging.WARNING,
        )
