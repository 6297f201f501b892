"""
adfmark - markdown to Atlassian Document Format compiler and validator.
"""

__version__ = "1.0.0"
