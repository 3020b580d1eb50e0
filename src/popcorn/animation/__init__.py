"""Cosmetic animation effects."""

from popcorn.animation.particles import CatchBurst, EffectLayer

__all__ = ["CatchBurst", "EffectLayer"]
