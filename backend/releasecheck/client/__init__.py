"""Client side of ReleaseCheck: HTTP adapter, views and terminal front end."""
