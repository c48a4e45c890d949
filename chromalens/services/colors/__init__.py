"""
ChromaLens Colors Module

Provides color space conversion, warm/cool/neutral classification and
dominant palette extraction, plus swatch rendering for palette previews.
"""
