"""
FastAPI REST Endpoints
======================

HTTP access to sticker rendering and the sample catalog.

Endpoints:
- GET /sticker/jetton: Jetton price sticker as PNG or SVG
- GET /sticker/tracker: Project tracker sticker as PNG or SVG
- GET /jettons: Sample tokens
- GET /tracker: Sample projects
- GET /health: Health check endpoint
"""
