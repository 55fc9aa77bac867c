"""SQL formulations of the donation analyses.

Each question is answered by more than one equivalent SQL statement so the
formulations can be timed and cross-checked against each other and against
the pandas implementation in ``donation_analytics.analysis``.

Execution backend:
  - DuckDB : local, in-memory; session DataFrames are registered as views
"""
