"""
Public APIs for Draftable.
"""
