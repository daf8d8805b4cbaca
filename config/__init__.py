"""Configuration package for the voice tally application.

Provides a configuration system with support for:
- Multiple configuration sources (defaults, JSON files, environment, CLI)
- Hierarchical configuration with proper precedence
- Frozen, validated configuration objects
- Simplified access through a facade

Main components:
- config.py: Configuration dataclasses and loader
- service.py: Facade deriving match settings and alias tables
"""
