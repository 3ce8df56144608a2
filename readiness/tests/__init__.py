"""
Unit tests for the readiness assessment.
"""
