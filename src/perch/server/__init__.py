"""ASGI seam: scope to Request, Response to ASGI messages."""
