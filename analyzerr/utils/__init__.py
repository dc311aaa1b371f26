"""
Utility helpers for Analyzerr
"""
