"""
Utility modules for managed_objects
"""
