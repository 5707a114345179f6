"""Web framework adapters exposing the agent stat read path."""
