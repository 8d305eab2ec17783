"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, input validation
    ├── models.py         # Dataclasses for fetch results (optional)
    └── {feature}.py      # Fetch functions (one per endpoint/concept)

Fetch functions take the shared ``ApiClient`` as their first argument so
every request of a run passes the same rate limiter::

    from unicorn_index.services.http import ApiClient

    def fetch_something(client: ApiClient, name: str) -> dict[str, Any]:
        return client.get_json(f"{API_URL}/{name}")

Sources:
  - github/   push events per user / organization
  - weather/  Open-Meteo daily temperature and precipitation
"""
