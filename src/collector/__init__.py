"""REPS collector — data sources for energy readings (Fingrid API, synthetic)."""
