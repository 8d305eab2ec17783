"""Processing, statistics and insights over fetched activity and weather.

Dependency rule: analysis/ imports from datasources/ models only.
It never fetches data or talks to Prefect.

Modules:
  - models: shared value types (daily points, weather observations, enums)
  - activity: push events -> daily activity series, normalization, gap filling
  - activity_weather: activity + daily weather -> synchronized series
  - stats: correlation, consistency, percentile, growth and momentum helpers
  - performance: user vs baseline, per-company ratios, trend
  - weather_correlation: activity vs temperature / rainfall / conditions
  - insights: human-readable findings from all of the above
  - serialization: AnalysisReport and its JSON-compatible dict

Adding an analysis module
-------------------------
1. Create ``analysis/{name}.py`` with pure functions over the types in
   ``analysis.models``.
2. No I/O, no HTTP, no Prefect decorators. Log skipped records with
   ``logging.getLogger(__name__)``.
3. Wire it into ``flows/analyze.py::build_analysis`` and add tests in
   ``tests/test_{name}.py``.
"""
