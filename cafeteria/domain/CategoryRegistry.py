"""CategoryRegistry: alphabetically ordered set of category labels."""
from typing import Iterable, List


class CategoryRegistry:
    def __init__(self, labels: Iterable[str] = ()):
        self._labels: List[str] = []
        for label in labels:
            if label and label not in self._labels:
                self._labels.append(label)
        self._labels.sort()

    def add(self, label: str) -> List[str]:
        '''Adds a label if missing; the list stays sorted.'''
        label = (label or "").strip()
        if label and label not in self._labels:
            self._labels.append(label)
            self._labels.sort()
        return self.labels()

    def rename(self, old: str, new: str) -> List[str]:
        new = (new or "").strip()
        if not new:
            raise ValueError("Category name cannot be empty")
        renamed = [new if c == old else c for c in self._labels]
        # Renaming onto an existing label collapses the two
        self._labels = sorted(dict.fromkeys(renamed))
        return self.labels()

    def remove(self, label: str) -> List[str]:
        self._labels = [c for c in self._labels if c != label]
        return self.labels()

    def labels(self) -> List[str]:
        return list(self._labels)

    def __contains__(self, label) -> bool:
        return label in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __repr__(self) -> str:
        return f"CategoryRegistry({self._labels!r})"
