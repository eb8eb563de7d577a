"""Flask JSON API for the IPC reporting portal."""
