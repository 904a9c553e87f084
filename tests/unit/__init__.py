"""Unit tests for individual components in isolation.

Coverage:
    - models/: Pydantic validation and error kinds
    - gateway/: Configuration loading and the HTTP client
    - threads/: Thread affinity store
    - chat/: Turn orchestration and run polling
    - ui/: Session state and submission helpers
"""
