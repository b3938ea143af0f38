"""Request pipeline — ASGI scope in, response messages out."""
