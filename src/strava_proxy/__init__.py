"""Strava OAuth proxy for browser clients."""
