"""
Core utilities: exceptions, logging, validation and project paths.
"""
