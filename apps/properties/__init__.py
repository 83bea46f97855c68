"""Properties app: listings, their images and the per-date availability calendar."""
