"""CLI entry points: osaft-docker-build (recipe + build) and osaft-docker (runner)."""
