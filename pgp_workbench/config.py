"""
PGP workbench configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class WorkbenchConfig:
    """
    Attributes:
        max_armor_length: Maximum accepted length of any armored input, in characters.
        expiry_soon_days: Days before expiration at which a key counts as expiring soon.
        expiry_week_days: Days before expiration at which a key counts as expiring this week.
        default_detached: Initial signature mode of new sign workflows.
        run_in_thread: Run backend calls in a worker thread instead of on the event loop.
    """

    max_armor_length: int = 1_000_000
    expiry_soon_days: int = 30
    expiry_week_days: int = 7
    default_detached: bool = False
    run_in_thread: bool = True

    def __post_init__(self) -> None:
        if self.max_armor_length <= 0:
            msg = "max_armor_length must be positive"
            raise ValueError(msg)
        if self.expiry_week_days <= 0:
            msg = "expiry_week_days must be positive"
            raise ValueError(msg)
        if self.expiry_soon_days < self.expiry_week_days:
            msg = "expiry_soon_days must not be shorter than expiry_week_days"
            raise ValueError(msg)
