"""
HTTP layer.

``router`` aggregates the endpoint modules under ``endpoints``;
``deps`` holds the FastAPI dependencies that hand services to them.
"""
