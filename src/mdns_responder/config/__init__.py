"""Configuration: advertisement models, runtime settings, logging."""
