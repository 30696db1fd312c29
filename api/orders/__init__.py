"""Checkout orders."""
