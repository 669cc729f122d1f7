"""Canvas, region and anchor coordinate system."""
