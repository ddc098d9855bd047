"""
Service layer.

Each service wraps the remote tables of one concern (items, ratings,
favorites, comments).  The catalog reader and the mutation gateway
compose them; API handlers and the catalog session only talk to those
two.
"""
