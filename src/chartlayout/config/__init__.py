"""Configuration defaults and settings models."""
