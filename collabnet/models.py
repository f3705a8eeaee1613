from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from .config import COLLABORATOR_SEPARATOR


@dataclass(frozen=True)
class AuthorRecord:
    """
    One crawled DBLP profile: the author's display name, their DBLP person
    identifier, and the identifiers of the co-authors found on their
    publication list in order of first appearance. Records are finalized
    once and never change afterwards.
    """
    name: str
    pid: str
    collaborators: Tuple[str, ...] = ()

    def collaborators_field(self, separator: str = COLLABORATOR_SEPARATOR) -> str:
        return separator.join(self.collaborators)

    def to_row(self, separator: str = COLLABORATOR_SEPARATOR) -> Dict[str, str]:
        """
        Flatten the record into the CSV row layout (name, id, collaborators).
        """
        return {
            "name": self.name,
            "id": self.pid,
            "collaborators": self.collaborators_field(separator),
        }


@dataclass
class AuthorPage:
    """
    Scratch state for the one page a request is processing. Each request owns
    its own instance, so pages fetched concurrently never see each other's
    fields or collaborator identifiers.
    """
    name: str = ""
    pid: str = ""
    # used as an insertion-ordered set
    collaborators: Dict[str, None] = field(default_factory=dict)

    def add_collaborator(self, pid: str) -> bool:
        """
        Remember a co-author identifier; returns False for blanks and for
        identifiers already seen on this page.
        """
        pid = (pid or "").strip()
        if not pid or pid in self.collaborators:
            return False
        self.collaborators[pid] = None
        return True

    def finalize(self) -> AuthorRecord:
        """
        Build the immutable record for this page. The author's own pid is only
        known after the whole page was read, so it is dropped here in case a
        publication listed the author among its co-authors.
        """
        self.collaborators.pop(self.pid, None)
        return AuthorRecord(
            name=self.name,
            pid=self.pid,
            collaborators=tuple(self.collaborators),
        )
