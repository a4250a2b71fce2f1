"""
Markup Module
=============

Visual tree value types and the sticker card builders.

Components:
- tree: container, text and image nodes plus their style model
- cards: jetton and tracker card layouts
"""
