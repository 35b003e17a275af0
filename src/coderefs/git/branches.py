"""Branch representations and stale branch detection."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Protocol

from coderefs.refs.models import ReferenceHunksRep


class NamedBranch(Protocol):
    name: str


@dataclass(slots=True, frozen=True)
class KnownBranch:
    """Branch previously reported to the flag-management service."""

    name: str
    sync_time: int | None = None


@dataclass(slots=True, frozen=True)
class BranchRep:
    """One branch snapshot with the code references found at its head."""

    name: str
    head: str
    sync_time: int
    update_sequence_id: int | None = None
    references: tuple[ReferenceHunksRep, ...] = ()

    def to_payload(self) -> dict[str, object]:
        """Return the ingestion API shape."""
        return {
            "name": self.name,
            "head": self.head,
            "updateSequenceId": self.update_sequence_id,
            "syncTime": self.sync_time,
            "references": [reference.to_payload() for reference in self.references],
        }


def calculate_stale_branches(
    branches: Iterable[NamedBranch], remote_branches: Collection[str]
) -> list[str]:
    """Return branch names known locally but no longer present on the remote."""
    remote = set(remote_branches)
    stale: list[str] = []
    for branch in branches:
        if branch.name not in remote and branch.name not in stale:
            stale.append(branch.name)
    return stale
