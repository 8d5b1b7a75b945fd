"""Geofence region service."""
