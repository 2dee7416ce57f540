"""Mentorship scheduling backend: availability, session booking and lifecycle."""
