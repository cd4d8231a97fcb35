"""
Command implementations for wt.
"""
