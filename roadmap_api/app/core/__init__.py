"""Configuration, logging, storage access and session handling."""
