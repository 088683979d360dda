"""
Pydantic schema definitions for API payloads.

Request bodies keep every field optional so that missing values are
reported by the services as a 400 with a readable message rather than
FastAPI's generic 422.  Products are free-form documents and are not
modelled; only the store acknowledgments returned for writes are.
"""
