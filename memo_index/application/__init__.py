"""
Application layer.

Coordinates core components and boundary adapters into use cases.
"""
