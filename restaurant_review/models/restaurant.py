"""Restaurant and review data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Review(BaseModel):
    """A customer review.

    There is no identity field, so two reviews with the same author, text and
    date are equal.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Author name")
    review: str = Field(..., description="Review text")
    date: str | None = Field(None, description="Date stamped by the server")


class Restaurant(BaseModel):
    """Restaurant details with its reviews, as delivered by the API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Restaurant identifier")
    name: str = Field(..., description="Restaurant name")
    description: str = Field(default="", description="Restaurant description")
    picture_id: str | None = Field(
        None, alias="pictureId", description="Picture identifier"
    )
    city: str | None = Field(None, description="City")
    address: str | None = Field(None, description="Street address")
    rating: float | None = Field(None, description="Average rating")
    categories: tuple[dict[str, Any], ...] = Field(
        default=(), description="Cuisine categories"
    )
    menus: dict[str, Any] | None = Field(None, description="Food and drink menus")
    customer_reviews: tuple[Review, ...] = Field(
        default=(), alias="customerReviews", description="Reviews, oldest first"
    )

    def image_url(self, base_url: str) -> str | None:
        """Build the picture URL under ``base_url``.

        Args:
            base_url: Image endpoint, e.g. ``https://host/images/large/``

        Returns:
            Full URL, or None when the restaurant has no picture
        """
        if not self.picture_id:
            return None
        return f"{base_url.rstrip('/')}/{self.picture_id}"


class RestaurantResponse(BaseModel):
    """Envelope returned by ``GET detail/{id}``."""

    error: bool = False
    message: str = ""
    restaurant: Restaurant | None = None


class PostReviewResponse(BaseModel):
    """Envelope returned by ``POST review``."""

    model_config = ConfigDict(populate_by_name=True)

    error: bool = False
    message: str = ""
    customer_reviews: tuple[Review, ...] | None = Field(
        None, alias="customerReviews"
    )
