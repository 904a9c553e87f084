"""Test package for Assistant Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: Endpoint and UI round trips through the FastAPI app
    - fake_gateway.py: In-memory stand-in for the hosted Assistants API

The hosted service is never contacted. Gateway traffic goes through an
httpx MockTransport backed by FakeGateway.
Leverages pytest with pytest-check for soft assertions.
"""
