"""Review list adapter: tracks the displayed list and diffs updates."""

import difflib
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from restaurant_review.models import Review


@dataclass(frozen=True)
class ListChange:
    """An insertion or removal at a position of the displayed list."""

    kind: Literal["insert", "remove"]
    position: int
    items: tuple[Review, ...]


def diff_reviews(old: Sequence[Review], new: Sequence[Review]) -> list[ListChange]:
    """Compute the changes turning ``old`` into ``new``.

    Reviews have no identifier, so value equality decides both whether two
    entries are the same item and whether their content is the same. Equal
    entries therefore never produce an update, only inserts and removals.
    Removals come first and refer to positions in ``old``; insertions refer
    to positions in ``new``.
    """
    matcher = difflib.SequenceMatcher(a=list(old), b=list(new), autojunk=False)
    removals: list[ListChange] = []
    insertions: list[ListChange] = []

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("delete", "replace"):
            removals.append(ListChange("remove", i1, tuple(old[i1:i2])))
        if tag in ("insert", "replace"):
            insertions.append(ListChange("insert", j1, tuple(new[j1:j2])))

    return removals + insertions


def format_review(review: Review) -> str:
    """Render a review as its text followed by the author line."""
    return f"{review.review}\n- {review.name}"


class ReviewAdapter:
    """Holds the list currently shown and reports what each update changes."""

    def __init__(self) -> None:
        self.items: tuple[Review, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def submit_list(self, reviews: Sequence[Review]) -> list[ListChange]:
        """Replace the displayed list.

        Args:
            reviews: New list, taken as is

        Returns:
            Changes relative to the previous list
        """
        changes = diff_reviews(self.items, reviews)
        self.items = tuple(reviews)
        return changes

    def render(self) -> list[str]:
        return [format_review(review) for review in self.items]
