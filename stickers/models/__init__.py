"""
Data Models
===========

Pydantic data models for request/response validation.

Models:
- schemas: sticker input records, health and error responses
"""
