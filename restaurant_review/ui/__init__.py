"""Presentation helpers for the review screen."""

from restaurant_review.ui.review_adapter import (
    ListChange,
    ReviewAdapter,
    diff_reviews,
    format_review,
)

__all__ = ["ListChange", "ReviewAdapter", "diff_reviews", "format_review"]
