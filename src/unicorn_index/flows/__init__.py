"""
Prefect flows for the analysis pipeline.

Flows:
- analyze: Fetch a user's and the baseline's push events plus weather, then
  build the analysis report

Usage (local):
    python -m unicorn_index.flows.analyze USERNAME

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'analyze-user/default'
"""
