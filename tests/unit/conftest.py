"""
Unit test fixtures. Pure core with in-memory repositories; no real DB.
"""
