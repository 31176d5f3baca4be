"""
Services module for the redirect and attribution flow.

This module contains the service classes (click handling, code
resolution, statistics) and their helpers (code codec, resolution cache,
slug registry, link building), kept separate from the API endpoints and
the storage backends.
"""
