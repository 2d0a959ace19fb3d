"""Rento booking scheduling and availability service."""
