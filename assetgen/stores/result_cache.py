"""Per-loader memo of the inputs that produced the last result."""

from __future__ import annotations

from typing import Any, List, Optional

from ..models import ChangeDescriptor


class ResultCache:
    """Remembers which input fingerprints produced a loader's last output.

    Invalidation is targeted: ``matches_prior`` only answers whether the one
    file named by a change is unchanged relative to the last computation. It
    never re-validates the other recorded inputs.
    """

    def __init__(self) -> None:
        self.input_fingerprints: List[ChangeDescriptor] = []
        self.result: Any = None

    def reset(self) -> None:
        self.input_fingerprints = []
        self.result = None

    def record(self, descriptor: ChangeDescriptor) -> None:
        self.input_fingerprints.append(descriptor)

    def matches_prior(self, descriptor: ChangeDescriptor) -> bool:
        return any(
            entry.filepath == descriptor.filepath and entry.fingerprint == descriptor.fingerprint
            for entry in self.input_fingerprints
        )

    def fingerprint_for(self, filepath: str) -> Optional[str]:
        for entry in self.input_fingerprints:
            if entry.filepath == filepath:
                return entry.fingerprint
        return None

    @property
    def paths(self) -> List[str]:
        return [entry.filepath for entry in self.input_fingerprints]

    def __len__(self) -> int:
        return len(self.input_fingerprints)


__all__ = ["ResultCache"]
