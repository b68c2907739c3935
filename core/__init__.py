"""
Core utilities: logging setup and shutdown coordination
"""
