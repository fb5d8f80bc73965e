class ConfigurationError(ValueError):
    """Invalid sampler configuration, raised before any sampling starts."""
