"""Domain layer: capability flags and resolution tags.

This layer depends only on stdlib.
It must never import from services, infrastructure, or config.
"""
