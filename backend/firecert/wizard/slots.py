"""Document slots — one per required/optional document of a session.

A slot is in exactly one of three states:
  None            nothing attached
  StagedFile      bytes picked in this session, not uploaded yet
  PersistedRef    URL stored on the draft being edited

Transitions:
  stage    None / PersistedRef → StagedFile   (replaces the old reference)
  remove   StagedFile / PersistedRef → None

PhotoSet holds the free-form photo attachments of a checklist.

Nothing is uploaded here.  Staged files are resolved to URLs by the
submission reconciler, so cancelling a session leaves no stray uploads.
"""

from dataclasses import dataclass, field
from typing import Iterable, Union

from firecert.wizard.requirements import DocumentRequirement


@dataclass(frozen=True)
class StagedFile:
    filename: str
    content: bytes = field(repr=False)
    mime_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class PersistedRef:
    url: str


SlotState = Union[StagedFile, PersistedRef, None]


@dataclass(frozen=True)
class FilePolicy:
    """Upload limits applied when a file is staged and again at submit."""

    max_bytes: int = 20 * 1024 * 1024
    blocked_mime_prefixes: tuple[str, ...] = ("video/",)

    def check(self, staged: StagedFile) -> str | None:
        if staged.size_bytes > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            return f"File size exceeds {limit_mb}MB limit"
        mime = (staged.mime_type or "").lower()
        if any(mime.startswith(prefix) for prefix in self.blocked_mime_prefixes):
            return "Video files are not allowed"
        return None


class DocumentSlotStore:
    """Slot states keyed by document slug."""

    def __init__(self, policy: FilePolicy | None = None):
        self.policy = policy or FilePolicy()
        self._slots: dict[str, SlotState] = {}

    # ── Setup ────────────────────────────────────────────────

    def load(self, record: dict, slugs: Iterable[str]) -> None:
        """Seed slots from a draft's reference columns."""
        for slug in slugs:
            url = record.get(slug)
            self._slots[slug] = PersistedRef(url) if url else None

    def sync(self, requirements: Iterable[DocumentRequirement]) -> list[str]:
        """Keep only slots named by the current requirement list.

        Returns the dropped slugs.
        """
        wanted = {req.slug for req in requirements}
        dropped = [slug for slug in self._slots if slug not in wanted]
        for slug in dropped:
            del self._slots[slug]
        for slug in wanted:
            self._slots.setdefault(slug, None)
        return dropped

    # ── Mutations ────────────────────────────────────────────

    def stage(self, slug: str, staged: StagedFile) -> str | None:
        """Attach a file, replacing whatever the slot held.

        Returns a policy error and leaves the slot unchanged when the file
        is rejected.
        """
        error = self.policy.check(staged)
        if error:
            return error
        self._slots[slug] = staged
        return None

    def remove(self, slug: str) -> None:
        if slug in self._slots:
            self._slots[slug] = None

    def clear(self) -> None:
        self._slots.clear()

    # ── Queries ──────────────────────────────────────────────

    def state(self, slug: str) -> SlotState:
        return self._slots.get(slug)

    def has_document(self, slug: str) -> bool:
        return self._slots.get(slug) is not None

    def staged(self) -> dict[str, StagedFile]:
        return {
            slug: s for slug, s in self._slots.items() if isinstance(s, StagedFile)
        }

    def persisted(self) -> dict[str, str]:
        return {
            slug: s.url for slug, s in self._slots.items() if isinstance(s, PersistedRef)
        }

    def policy_errors(self) -> dict[str, str]:
        errors = {}
        for slug, staged in self.staged().items():
            error = self.policy.check(staged)
            if error:
                errors[slug] = error
        return errors

    def slugs(self) -> list[str]:
        return list(self._slots)

    def snapshot(self) -> dict[str, dict]:
        out = {}
        for slug, s in self._slots.items():
            if isinstance(s, StagedFile):
                out[slug] = {
                    "state": "staged",
                    "filename": s.filename,
                    "size_bytes": s.size_bytes,
                    "mime_type": s.mime_type,
                }
            elif isinstance(s, PersistedRef):
                out[slug] = {"state": "persisted", "url": s.url}
            else:
                out[slug] = {"state": "empty"}
        return out


class PhotoSet:
    """Photos attached to a session, kept in the order they were added.

    Like document slots, nothing is uploaded until submit.
    """

    def __init__(self, policy: FilePolicy | None = None):
        self.policy = policy or FilePolicy()
        self._files: list[StagedFile] = []

    def __len__(self) -> int:
        return len(self._files)

    def add(self, staged: StagedFile) -> str | None:
        """Append a photo.  Returns an error and adds nothing when rejected."""
        error = self.policy.check(staged)
        if error:
            return error
        if not (staged.mime_type or "").lower().startswith("image/"):
            return "Only image files can be attached"
        self._files.append(staged)
        return None

    def remove(self, position: int) -> bool:
        if not 0 <= position < len(self._files):
            return False
        del self._files[position]
        return True

    def clear(self) -> None:
        self._files.clear()

    def staged(self) -> list[StagedFile]:
        return list(self._files)

    def snapshot(self) -> list[dict]:
        return [
            {"filename": f.filename, "size_bytes": f.size_bytes, "mime_type": f.mime_type}
            for f in self._files
        ]
