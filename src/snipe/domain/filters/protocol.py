"""Admission filter protocol"""

from typing import Protocol, runtime_checkable

from snipe.domain.models import TokenTick


@runtime_checkable
class AdmissionFilter(Protocol):
    """Decides whether an unseen token should be opened as a position"""

    def accepts(self, tick: TokenTick) -> bool:
        """Return True if a position should be opened for ``tick``"""
        ...
