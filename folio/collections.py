from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .content import Document


class Collection(Sequence[Document]):
    """Immutable, ordered group of Documents sharing a layout.

    Documents are held newest first, undated ones last. Documents with
    equal dates keep the order they were given in.
    """

    def __init__(self, name: str, documents: Iterable[Document], presorted: bool = False):
        self.name = name
        documents = tuple(documents)
        if not presorted:
            # sorted() is stable with reverse=True as well
            dated = sorted(
                (d for d in documents if d.date is not None),
                key=lambda d: d.date,
                reverse=True,
            )
            documents = tuple(dated) + tuple(d for d in documents if d.date is None)
        self._documents: tuple[Document, ...] = documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return Collection(self.name, self._documents[item], presorted=True)
        return self._documents[item]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return self.name == other.name and self._documents == other._documents

    __hash__ = None

    def limit(self, count: int | None) -> Collection:
        """Return the first ``count`` documents, or all when count is None."""
        if count is None:
            return self
        return self[:count]

    def latest(self, count: int = 5) -> Collection:
        return self.limit(count)

    def published(self) -> Collection:
        return Collection(self.name, (d for d in self if not d.draft), presorted=True)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Collection({self.name!r}, {len(self._documents)} documents)"


def assemble_collections(
    documents: Iterable[Document], default_layout: str = "default"
) -> dict[str, Collection]:
    """Partition documents by layout into ordered collections.

    Args:
        documents: Documents in store enumeration order.
        default_layout: Layout name for documents that set none.

    Returns:
        Mapping of layout name to Collection, in order of first appearance.
    """
    partitions: dict[str, list[Document]] = {}
    for document in documents:
        partitions.setdefault(document.layout or default_layout, []).append(document)
    return {name: Collection(name, docs) for name, docs in partitions.items()}
