"""
Core Business Logic
==================

Sticker cards, fonts and the rendering pipeline.

Modules:
- markup: Visual tree types and the card builders
- rendering: Flex layout, SVG rendering and PNG rasterization
- fonts: Inter font loading
- pipeline: Fonts to SVG to optional PNG
"""
