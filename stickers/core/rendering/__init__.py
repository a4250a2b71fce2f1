"""
Rendering Module
===============

Vector and raster output for visual trees.

Components:
- layout: Flexbox subset computing box geometry
- svg_renderer: Positioned boxes to SVG markup with embedded fonts
- png_generator: Browser automation for SVG to PNG conversion
- images: Image fetching and inlining
- text: Font metrics and colour handling
"""
