"""Couple Resolve backend."""
