"""Speedreader: document ingestion and RSVP playback."""
