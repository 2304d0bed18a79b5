"""Configuration for cmdpalette."""
