"""
Pydantic schema definitions for catalog payloads.

Schemas double as the plain data handed to presentation code: the
services return these models, never rows from the backend.
"""
