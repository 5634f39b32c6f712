"""
Template name constants.

Pure constants - no I/O or file system knowledge.
"""


class Template:
    """Template name constants. Use these instead of raw strings."""

    REFINE_SYSTEM = "refine_system"
    REFINE_USER = "refine_user"
