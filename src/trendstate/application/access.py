from __future__ import annotations

from dataclasses import dataclass

from trendstate.domain.model.errors import AlreadyInitialized, NotInitialized, Unauthorized


@dataclass
class AccessControl:
    """Single controller identity, set exactly once."""

    controller: str | None = None

    @property
    def initialized(self) -> bool:
        return self.controller is not None

    def claim(self, caller: str) -> None:
        if not caller:
            raise ValueError("caller identity must be a non-empty string")
        if self.controller is not None:
            raise AlreadyInitialized(self.controller)
        self.controller = caller

    def require_controller(self, caller: str, operation: str) -> None:
        if self.controller is None:
            raise NotInitialized()
        if caller != self.controller:
            raise Unauthorized(caller, operation)
