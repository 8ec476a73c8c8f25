"""
Draftable: draft/publish versioning for Django models.
"""
__version__ = "0.1.0"
