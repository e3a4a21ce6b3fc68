"""
Tests for the arena match parser.
"""
