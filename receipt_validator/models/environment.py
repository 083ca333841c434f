"""
Verification environments - which verifyReceipt endpoint a request targets.

Production and Sandbox are fixed Apple endpoints. Custom carries any URL,
e.g. a proxy that forwards to Apple and returns the same response shape.
"""

from dataclasses import dataclass
from enum import Enum

PRODUCTION_URL = "https://buy.itunes.apple.com/verifyReceipt"
SANDBOX_URL = "https://sandbox.itunes.apple.com/verifyReceipt"


class EnvironmentKind(str, Enum):
    """Environment variant."""

    PRODUCTION = "Production"
    SANDBOX = "Sandbox"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class Environment:
    """Immutable verification environment.

    Build instances with ``production()``, ``sandbox()`` or ``custom(url)``.
    """

    kind: EnvironmentKind
    override_url: str | None = None

    def __post_init__(self) -> None:
        """Validate the override URL against the variant."""
        if self.kind is EnvironmentKind.CUSTOM:
            if not self.override_url:
                raise ValueError("Custom environment requires a URL")
        elif self.override_url is not None:
            raise ValueError(f"{self.kind.value} environment does not accept a URL")

    @classmethod
    def production(cls) -> "Environment":
        return cls(EnvironmentKind.PRODUCTION)

    @classmethod
    def sandbox(cls) -> "Environment":
        return cls(EnvironmentKind.SANDBOX)

    @classmethod
    def custom(cls, url: str) -> "Environment":
        return cls(EnvironmentKind.CUSTOM, url)

    @classmethod
    def from_name(cls, value: str | None) -> "Environment | None":
        """
        Parse the environment reported by a verification response.

        Accepts "Production"/"Sandbox" in any case, and the legacy "0"/"1"
        tokens. Returns None for anything else.
        """
        if value is None:
            return None
        token = value.strip().lower()
        if token in ("production", "0"):
            return cls.production()
        if token in ("sandbox", "1"):
            return cls.sandbox()
        return None

    @property
    def url(self) -> str:
        """Endpoint URL for this environment."""
        if self.kind is EnvironmentKind.PRODUCTION:
            return PRODUCTION_URL
        if self.kind is EnvironmentKind.SANDBOX:
            return SANDBOX_URL
        if self.override_url is None:
            raise ValueError("Custom environment requires a URL")
        return self.override_url

    @property
    def name(self) -> str:
        return self.kind.value

    def is_sandbox(self) -> bool:
        return self.kind is EnvironmentKind.SANDBOX

    def __str__(self) -> str:
        return self.name
