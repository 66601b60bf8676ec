"""Domain layer: records, configuration value objects, errors and host ports."""
