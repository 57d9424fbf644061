"""Data models for the restaurant review client."""

from restaurant_review.models.restaurant import (
    PostReviewResponse,
    Restaurant,
    RestaurantResponse,
    Review,
)

__all__ = ["PostReviewResponse", "Restaurant", "RestaurantResponse", "Review"]
