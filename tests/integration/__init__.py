"""Integration tests for components working together as a system.

Coverage:
    - API endpoints with real HTTP requests over ASGITransport
    - Full chat turn from form submission to assistant reply
    - Chat page submission helper against the running app
"""
