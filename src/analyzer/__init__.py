"""REPS Analyzer — analysis core over energy readings.

Modules
───────
  statistics  — mean, median, mode, range, midrange; per-source summaries
  filters     — hour/day/ISO-week/month filters, range and value searches
  functor     — fmap over list, tuple, Maybe, Box
  transforms  — scale, unit conversion, normalisation, clamping
  detector    — rule-based: Reading → Alert
  reporter    — pandas tables, CSV, TXT, PNG outputs
  pipeline    — orchestrate analysis and report writing
"""
