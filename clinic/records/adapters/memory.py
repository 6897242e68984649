from collections.abc import Sequence
from typing import Generic, TypeVar

from clinic.domain.models import LoadReport

RecordT = TypeVar("RecordT")


class InMemoryRepository(Generic[RecordT]):
    """In-memory stand-in for a CSV table, used by tests and the ``memory`` backend.

    Pre-load ``records`` (and ``warnings``) to control what ``load`` returns.
    Set ``load_error``, ``rewrite_error`` or ``append_error`` to make the
    corresponding method raise.

    After calls, inspect ``rewrites`` and ``appended`` to verify what was
    committed.
    """

    def __init__(self, records: Sequence[RecordT] = ()) -> None:
        self.records: list[RecordT] = list(records)
        self.warnings: list[str] = []
        self.rewrites: list[list[RecordT]] = []
        self.appended: list[RecordT] = []

        self.load_error: Exception | None = None
        self.rewrite_error: Exception | None = None
        self.append_error: Exception | None = None

    def load(self) -> LoadReport[RecordT]:
        if self.load_error:
            raise self.load_error
        return LoadReport(
            records=[self._copy(record) for record in self.records],
            warnings=list(self.warnings),
        )

    def rewrite(self, records: Sequence[RecordT]) -> None:
        if self.rewrite_error:
            raise self.rewrite_error
        snapshot = [self._copy(record) for record in records]
        self.rewrites.append(snapshot)
        self.records = list(snapshot)

    def append(self, record: RecordT) -> None:
        if self.append_error:
            raise self.append_error
        self.appended.append(record)
        self.records.append(self._copy(record))

    @staticmethod
    def _copy(record: RecordT) -> RecordT:
        model_copy = getattr(record, "model_copy", None)
        return model_copy() if model_copy is not None else record
