"""
Application package initializer.

The catalog is organised into a few small pieces: ``core`` holds
configuration, logging, errors and the adapters for the hosted
backend (storage and auth), ``services`` holds the catalog reader,
the mutation gateway and the view-state session, and ``api`` exposes
them over HTTP.  Persistence and authentication live entirely in the
backend service; nothing here owns a schema.
"""

from .main import app  # noqa: F401
