"""
Static Data
===========

Read-only catalog tables served by the API.
"""
