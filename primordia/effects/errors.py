class ConfigurationError(ValueError):
    """Raised when a particle field configuration cannot be built.

    Covers negative counts, negative or non-finite extents and speeds, and
    zero-extent distributions where a positive one is required. Raised at
    construction or reconfiguration time; invalid values are never clamped.
    """

    pass
