"""User storage adapters."""
