"""Input loading and reshaping for chart layouts."""
