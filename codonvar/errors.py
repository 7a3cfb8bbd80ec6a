class InvalidArgument(ValueError):
    """Raised for malformed construction arguments (ORF string, sizes)"""


class OutOfRange(ValueError):
    """Raised for coordinates outside the bounds of a structure"""
