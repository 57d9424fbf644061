"""Remote client and review session services."""

from restaurant_review.services.restaurant_client import (
    HttpRestaurantClient,
    RestaurantClient,
)
from restaurant_review.services.review_session import ReviewSessionController

__all__ = ["HttpRestaurantClient", "RestaurantClient", "ReviewSessionController"]
