"""REPS storage — reservoir simulation and immutable session state."""
