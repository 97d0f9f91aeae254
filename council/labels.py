"""Anonymization labels and the label <-> answer table for one run."""

import string

from council.models import AnonymizedAnswer, ModelAnswer

_LETTERS = string.ascii_uppercase
LABEL_PREFIX = "Response"


def label_for_index(index: int) -> str:
    """Return the label for the answer at ``index``.

    0 -> "Response A", 25 -> "Response Z", 26 -> "Response A1",
    52 -> "Response A2", and so on.
    """
    if index < 0:
        raise ValueError(f"Label index must be non-negative, got {index}")
    cycle, offset = divmod(index, len(_LETTERS))
    suffix = str(cycle) if cycle else ""
    return f"{LABEL_PREFIX} {_LETTERS[offset]}{suffix}"


class LabelTable:
    """Fixed-size bidirectional table between labels and anonymized answers.

    Built once from the answers in order; position ``i`` holds label
    ``label_for_index(i)``. Lookups work both ways through the index.
    """

    def __init__(self, answers: list[ModelAnswer]) -> None:
        self._labels = tuple(label_for_index(i) for i in range(len(answers)))
        self._models = tuple(a.model for a in answers)
        self._contents = tuple(a.content for a in answers)
        self._index = {label: i for i, label in enumerate(self._labels)}
        if len(self._index) != len(self._labels):
            raise ValueError("Duplicate labels generated")

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._index

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    def index_of(self, label: str) -> int:
        return self._index[label]

    def label_at(self, index: int) -> str:
        return self._labels[index]

    def model_for(self, label: str) -> str:
        return self._models[self._index[label]]

    def labels_for_model(self, model: str) -> list[str]:
        return [label for label, m in zip(self._labels, self._models) if m == model]

    def label_to_model(self) -> dict[str, str]:
        return dict(zip(self._labels, self._models))

    def anonymized(self) -> list[AnonymizedAnswer]:
        return [
            AnonymizedAnswer(label=label, model=model, content=content)
            for label, model, content in zip(self._labels, self._models, self._contents)
        ]
