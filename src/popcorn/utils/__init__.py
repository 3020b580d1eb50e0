"""Utility helpers for Popcorn Catcher."""
