"""Restaurant review client: restaurant details, reviews and review submission."""
