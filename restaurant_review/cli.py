"""Command-line interface for the restaurant review client."""

import asyncio
import logging
import sys

from restaurant_review.config import Config, get_config, setup_logging
from restaurant_review.models import Restaurant, Review
from restaurant_review.services import ReviewSessionController
from restaurant_review.state import Subscription, consuming
from restaurant_review.ui import ReviewAdapter

logger = logging.getLogger(__name__)

QUIT_COMMANDS = ("quit", "exit", "q", "/quit")


class ReviewCLI:
    """Terminal view of a review session.

    The view owns its subscriptions. ``detach`` followed by ``attach`` rebuilds
    the screen from the controller's current state; errors and notices that
    were already shown are not shown again.
    """

    def __init__(
        self,
        controller: ReviewSessionController,
        cfg: Config | None = None,
        out=None,
    ) -> None:
        """Initialize the CLI.

        Args:
            controller: Session whose channels are rendered
            cfg: Configuration to use (global configuration if omitted)
            out: Text stream to write to (stdout if omitted)
        """
        self.controller = controller
        self.config = cfg or get_config()
        self.out = out or sys.stdout
        self.adapter = ReviewAdapter()
        self._subscriptions: list[Subscription] = []

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    def attach(self) -> None:
        """Subscribe to every controller channel."""
        if self._subscriptions:
            return
        # A fresh view starts from an empty list, like a recreated screen.
        self.adapter = ReviewAdapter()
        self._subscriptions = [
            self.controller.restaurant.attach(self.show_restaurant),
            self.controller.reviews.attach(self.show_reviews),
            self.controller.loading.attach(self.show_loading),
            self.controller.errors.attach(consuming(self.show_error)),
            self.controller.notices.attach(consuming(self.show_notice)),
        ]

    def detach(self) -> None:
        """Drop every subscription held by the view."""
        for subscription in self._subscriptions:
            subscription.detach()
        self._subscriptions = []

    def show_restaurant(self, restaurant: Restaurant) -> None:
        self._print("\n" + "=" * 60)
        self._print(restaurant.name.upper())
        if restaurant.city:
            self._print(restaurant.city)
        self._print("=" * 60)
        self._print(restaurant.description)
        image_url = restaurant.image_url(self.config.image_base_url)
        if image_url:
            self._print(f"\nPicture: {image_url}")

    def show_reviews(self, reviews: tuple[Review, ...]) -> None:
        changes = self.adapter.submit_list(reviews)
        added = sum(len(c.items) for c in changes if c.kind == "insert")

        header = f"\nReviews ({len(self.adapter)}"
        if 0 < added < len(self.adapter):
            header += f", {added} new"
        self._print(header + "):")
        self._print("-" * 60)
        for text in self.adapter.render():
            self._print(text)
            self._print("")

    def show_loading(self, is_loading: bool) -> None:
        if is_loading:
            self._print("Loading...")

    def show_error(self, message: str) -> None:
        self._print(f"\n⚠ {message}")

    def show_notice(self, message: str) -> None:
        self._print(f"\n✓ {message}")

    async def run(self) -> None:
        """Run the interactive loop until the user quits."""
        self.attach()
        self.controller.start_session()

        self._print("\nType a review and press Enter to submit it.")
        self._print("Commands: /refresh to reload, /redraw to rebuild the view, quit to exit.\n")

        while True:
            try:
                user_input = (await asyncio.to_thread(input, "\nYour review: ")).strip()
            except (EOFError, KeyboardInterrupt):
                self._print("\n\nGoodbye!")
                break

            if not user_input:
                continue

            if user_input.lower() in QUIT_COMMANDS:
                self._print("\nThank you for your review. Goodbye!")
                break

            try:
                await self.handle(user_input)
            except Exception as e:
                logger.error(f"Unexpected error: {e}", exc_info=True)
                self._print(f"\n⚠ An unexpected error occurred: {e}")
                self._print("Please try again or type 'quit' to exit.")

        self.detach()

    async def handle(self, user_input: str) -> None:
        """Execute one line of user input and wait for its completion.

        Args:
            user_input: Review text or a slash command
        """
        if user_input == "/redraw":
            self.detach()
            self.attach()
            return

        if user_input == "/refresh":
            await self.controller.refresh()
            return

        await self.controller.submit_review(user_input)

    def _print(self, text: str) -> None:
        print(text, file=self.out)


async def _run_cli(cfg: Config) -> None:
    controller = ReviewSessionController(cfg=cfg)
    try:
        await ReviewCLI(controller, cfg).run()
    finally:
        await controller.aclose()


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cfg = get_config()
    except Exception as e:
        print(f"Configuration error: {e}")
        print("\nCheck the environment variables or the .env file, e.g.:")
        print("  API_BASE_URL=https://restaurant-api.dicoding.dev/")
        print("  RESTAURANT_ID=uewq1zg2zlskfw1e867")
        sys.exit(1)

    setup_logging(cfg)

    try:
        asyncio.run(_run_cli(cfg))
    except KeyboardInterrupt:
        print("\n\nExiting. Goodbye!")


if __name__ == "__main__":
    main()
