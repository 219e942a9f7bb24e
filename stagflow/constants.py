"""
Global constants for the staggered-grid operators.

This module defines constants used throughout the codebase to ensure
consistency in array shapes and indexing.
"""

# Number of ghost volume layers on each side of every axis.
# All stencils reach at most one volume beyond the interior.
NGHOST = 1

# Supported spatial dimensions
SUPPORTED_DIMENSIONS = (2, 3)
