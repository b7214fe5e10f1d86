"""Monthly meal reviews: months, reviews, moderation and their persistence."""
