"""Review session state: one restaurant, its reviews and review submission.

The controller runs on the asyncio event loop. Network calls are awaited in
tasks scheduled on the same loop, so every state update happens on the loop
thread and observers never see concurrent writes.
"""

import asyncio
import logging

from restaurant_review.config import Config, get_config
from restaurant_review.errors import RestaurantApiError
from restaurant_review.models import Restaurant, Review
from restaurant_review.services.restaurant_client import (
    HttpRestaurantClient,
    RestaurantClient,
)
from restaurant_review.state import ConsumableEvent, ObservableState, ReadOnlyState

logger = logging.getLogger(__name__)

REVIEW_SUBMITTED = "Review submitted"


class ReviewSessionController:
    """Publishes restaurant, review and loading state for a review screen.

    Channels:
        restaurant: latest ``Restaurant`` snapshot
        reviews: latest review list, replaced wholesale
        loading: True while at least one operation is in flight
        errors: ``ConsumableEvent`` with a failure description
        notices: ``ConsumableEvent`` with a success message
    """

    def __init__(
        self,
        client: RestaurantClient | None = None,
        cfg: Config | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Remote client (an ``HttpRestaurantClient`` is created and
                owned by the controller if omitted)
            cfg: Configuration to use (global configuration if omitted)
        """
        self.config = cfg or get_config()
        self._owns_client = client is None
        self.client = client if client is not None else HttpRestaurantClient(self.config)

        self.restaurant_id: str | None = None

        self._restaurant: ObservableState[Restaurant] = ObservableState()
        self._reviews: ObservableState[tuple[Review, ...]] = ObservableState()
        self._loading: ObservableState[bool] = ObservableState(False)
        self._errors: ObservableState[ConsumableEvent[str]] = ObservableState()
        self._notices: ObservableState[ConsumableEvent[str]] = ObservableState()

        self._in_flight = 0
        # Task -> whether it still holds its in-flight slot
        self._tasks: dict[asyncio.Task, bool] = {}

    @property
    def restaurant(self) -> ReadOnlyState[Restaurant]:
        return self._restaurant.read_only()

    @property
    def reviews(self) -> ReadOnlyState[tuple[Review, ...]]:
        return self._reviews.read_only()

    @property
    def loading(self) -> ReadOnlyState[bool]:
        return self._loading.read_only()

    @property
    def errors(self) -> ReadOnlyState[ConsumableEvent[str]]:
        return self._errors.read_only()

    @property
    def notices(self) -> ReadOnlyState[ConsumableEvent[str]]:
        return self._notices.read_only()

    @property
    def in_flight(self) -> int:
        """Number of operations currently in flight."""
        return self._in_flight

    def start_session(self, restaurant_id: str | None = None) -> asyncio.Task:
        """Start loading a restaurant.

        Must be called from the event loop thread. Results of operations
        started for a previous restaurant are dropped once this returns.

        Args:
            restaurant_id: Restaurant to show (configured id if omitted)

        Returns:
            Task running the fetch
        """
        self.restaurant_id = restaurant_id or self.config.restaurant_id
        logger.info(f"Starting review session for {self.restaurant_id}")
        return self._launch(self._fetch_restaurant(self.restaurant_id))

    def refresh(self) -> asyncio.Task:
        """Fetch the current restaurant again."""
        if self.restaurant_id is None:
            raise RuntimeError("start_session() must be called before refresh()")
        return self._launch(self._fetch_restaurant(self.restaurant_id))

    def submit_review(self, text: str, author: str | None = None) -> asyncio.Task:
        """Submit a review for the current restaurant.

        Args:
            text: Review body
            author: Reviewer name (configured author if omitted)

        Returns:
            Task running the submission
        """
        if self.restaurant_id is None:
            raise RuntimeError("start_session() must be called before submit_review()")
        author = author or self.config.author_name
        return self._launch(self._post_review(self.restaurant_id, author, text))

    async def aclose(self) -> None:
        """Cancel outstanding operations and release the client."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._owns_client:
            await self.client.aclose()

    def _launch(self, coro) -> asyncio.Task:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise

        # Loading is published before the task is scheduled.
        self._begin_operation()
        task = loop.create_task(coro)
        self._tasks[task] = True
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        if self._tasks.pop(task, False):
            # Cancelled or crashed before releasing its slot
            self._end_operation()

        if task.cancelled():
            logger.info("Review session operation cancelled")
        elif task.exception() is not None:
            logger.error(
                "Unexpected error in review session", exc_info=task.exception()
            )

    async def _fetch_restaurant(self, restaurant_id: str) -> None:
        try:
            restaurant = await self.client.fetch_restaurant(restaurant_id)
        except RestaurantApiError as e:
            self._fail(e, restaurant_id)
            return

        self._release()
        if self._is_stale(restaurant_id):
            return
        self._restaurant.set(restaurant)
        self._reviews.set(restaurant.customer_reviews)

    async def _post_review(self, restaurant_id: str, author: str, text: str) -> None:
        try:
            reviews = await self.client.post_review(restaurant_id, author, text)
        except RestaurantApiError as e:
            self._fail(e, restaurant_id)
            return

        # The server list is authoritative; nothing is appended locally.
        self._release()
        if self._is_stale(restaurant_id):
            return
        self._reviews.set(tuple(reviews))
        self._notices.set(ConsumableEvent(REVIEW_SUBMITTED))
        logger.info(f"Review list now has {len(reviews)} entries")

    def _fail(self, error: RestaurantApiError, restaurant_id: str) -> None:
        logger.error(f"Review session operation failed: {error.message}")
        self._release()
        if self._is_stale(restaurant_id):
            return
        self._errors.set(ConsumableEvent(error.message))

    def _is_stale(self, restaurant_id: str) -> bool:
        # Results for a restaurant the session has moved away from are dropped.
        if restaurant_id == self.restaurant_id:
            return False
        logger.info(f"Dropping result for {restaurant_id}, session shows {self.restaurant_id}")
        return True

    def _release(self) -> None:
        task = asyncio.current_task()
        if self._tasks.get(task):
            self._tasks[task] = False
            self._end_operation()

    def _begin_operation(self) -> None:
        self._in_flight += 1
        if self._in_flight == 1:
            self._loading.set(True)

    def _end_operation(self) -> None:
        self._in_flight -= 1
        if self._in_flight == 0:
            self._loading.set(False)
