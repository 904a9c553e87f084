"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Append-only transcript with role-coloured messages
    - Local system entries and notifications for failed turns
    - Send button disabled while a turn is in flight

Contains minimal business logic. Delegates every turn to the chat API.
"""
