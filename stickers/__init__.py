"""
Sticker Service
===============

An HTTP service that renders jetton price tickers and project usage trackers
as SVG or PNG sticker cards.

This package provides:
- Visual tree builders for the jetton and tracker card layouts
- A small flexbox layout engine and SVG writer
- PNG conversion through a pooled headless browser
- FastAPI endpoints for stickers and the static catalog
"""

__version__ = "1.0.0"
__author__ = "re:doubt"
