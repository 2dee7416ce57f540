"""Versioned API routers, mounted under ``settings.api_v1_prefix``."""
