from gitr.config import GitrConfig, ensure_initial_config, load_config


def get_config() -> GitrConfig:
    """Load the configuration, writing the defaults on first use."""
    return load_config(ensure_initial_config())
