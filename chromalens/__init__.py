"""
ChromaLens

Extracts a dominant, perceptually distinct color palette from an image and
sorts the colors into warm, cool, neutral and accent groups.
"""

__version__ = "1.0.0"
