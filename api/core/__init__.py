"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks both features use (pool, query catalog,
row mapping, image resolution, settings, errors). Feature-specific
statement binding and handlers live in `quotes/` and `categories/`.
"""
