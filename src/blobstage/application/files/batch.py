"""Application files – UploadBatch, an ordered collection with unique save names."""
from __future__ import annotations

from typing import Callable, Iterable, Iterator, Sequence, overload

from blobstage.application.files.candidate import UploadCandidate, UploadSource
from blobstage.application.files.resolver import NameResolver, resolve_save_name, windows_style
from blobstage.config.settings.staging import DEFAULT_MAX_NAME_ATTEMPTS
from blobstage.kernel.errors import InvalidInputError, NameResolutionExhaustedError
from blobstage.observability.logging import get_logger

__all__ = ["CandidateFactory", "UploadBatch"]

CandidateFactory = Callable[[UploadSource, str], UploadCandidate]

logger = get_logger(__name__)


def _identity(name: str) -> str:
    return name


class UploadBatch(Sequence[UploadCandidate]):
    """Candidates in insertion order whose save names are pairwise distinct.

    Duplicate save names are resolved on :meth:`add` with the batch's
    resolver, Windows-style by default::

        batch = UploadBatch()
        for _ in range(3):
            batch.add(UploadCandidate(io.BytesIO(b""), "a.txt"))
        batch.save_names  # ['a.txt', 'a (1).txt', 'a (2).txt']

    Before uploading, :meth:`resolve_against` renames members that clash
    with names already present in the target store.
    """

    def __init__(
        self,
        resolver: NameResolver = windows_style,
        *,
        max_attempts: int = DEFAULT_MAX_NAME_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise InvalidInputError("max_attempts must be >= 1", detail={"max_attempts": max_attempts})
        self._items: list[UploadCandidate] = []
        self._save_names: set[str] = set()
        self._resolver = resolver
        self.max_attempts = max_attempts

    @classmethod
    def from_uploads(
        cls,
        sources: Iterable[UploadSource],
        name_transform: Callable[[str], str] | None = None,
        *,
        factory: CandidateFactory = UploadCandidate.from_upload,
        resolver: NameResolver = windows_style,
        max_attempts: int = DEFAULT_MAX_NAME_ATTEMPTS,
    ) -> "UploadBatch":
        """Build a batch from framework uploads.

        Parameters
        ----------
        sources:
            Uploads in display order.
        name_transform:
            Maps the user's file name to the wanted save name (identity by
            default).  Collisions among the results are resolved as usual.
        factory:
            Builds the concrete candidate, e.g.
            :func:`~blobstage.application.files.images.image_candidate`.

        If any source cannot be built or added, every candidate built so far
        is closed before the error propagates.
        """
        transform = name_transform or _identity
        batch = cls(resolver, max_attempts=max_attempts)
        built: list[UploadCandidate] = []
        try:
            for source in sources:
                candidate = factory(source, transform(source.filename))
                built.append(candidate)
                batch.add(candidate)
        except Exception:
            for candidate in built:
                candidate.close()
            raise
        return batch

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[UploadCandidate]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> UploadCandidate: ...

    @overload
    def __getitem__(self, index: slice) -> list[UploadCandidate]: ...

    def __getitem__(self, index: int | slice) -> UploadCandidate | list[UploadCandidate]:
        return self._items[index]

    def __repr__(self) -> str:
        return f"UploadBatch(save_names={self.save_names!r})"

    @property
    def save_names(self) -> list[str]:
        return [c.save_name for c in self._items]

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def set_resolver(self, resolver: NameResolver) -> None:
        """Replace the resolver used for future collisions."""
        self._resolver = resolver

    def has_unique_name(self, name: str) -> bool:
        return name not in self._save_names

    def all_unique(self, external_names: Iterable[str]) -> bool:
        return not any(name in self._save_names for name in external_names)

    def add(self, candidate: UploadCandidate) -> UploadCandidate:
        """Append *candidate*, renaming it first if its save name is taken."""
        name = candidate.save_name
        if not self.has_unique_name(name):
            name = self._next_free_name(name, frozenset())
            logger.debug("upload_batch.renamed", requested=candidate.save_name, save_name=name)
        candidate._claim(self, name)  # noqa: SLF001
        self._items.append(candidate)
        self._save_names.add(name)
        return candidate

    def extend(self, candidates: Iterable[UploadCandidate]) -> None:
        for candidate in candidates:
            self.add(candidate)

    def resolve_against(self, external_names: Iterable[str]) -> dict[str, str]:
        """Rename members whose save name already exists in *external_names*.

        A replacement must be free both inside the batch and in
        *external_names*.  Members are visited in insertion order.  Returns
        ``{old_name: new_name}`` for every rename.
        """
        existing = frozenset(external_names)
        renamed: dict[str, str] = {}
        for candidate in self._items:
            old = candidate.save_name
            if old not in existing:
                continue
            new = self._next_free_name(old, existing)
            self._save_names.discard(old)
            self._save_names.add(new)
            candidate._claim(self, new, rename=True)  # noqa: SLF001
            renamed[old] = new
            logger.info("upload_batch.renamed", requested=old, save_name=new, reason="exists_in_store")
        return renamed

    def _next_free_name(self, name: str, existing: frozenset[str]) -> str:
        for attempt in range(1, self.max_attempts + 1):
            solution = resolve_save_name(name, attempt, self._resolver)
            if solution not in self._save_names and solution not in existing:
                return solution
        raise NameResolutionExhaustedError(name, self.max_attempts)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release every member's stream."""
        for candidate in self._items:
            candidate.close()

    def __enter__(self) -> "UploadBatch":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
