# src/railsi18n/__init__.py
"""
RailsI18n - translation lookup for Rails-style YAML locale files.

This package discovers ``config/locales/**/*.yml`` documents in one or more
project roots, merges them into a per-project, per-locale translation tree
and answers point lookups for dotted keys such as ``"hello.world"``.

Main Components:
- document: YAML locale document parsing and flattening
- tree: Translation tree store, document-scoped merge and lookup index
- locale_detector: Default locale detection with fallback
- resolver: Load / watch lifecycle and the public query surface
- workspace: Filesystem-backed workspace and polling file watcher
- rails_commands: Declared load paths from ``bin/rails runner``
- config: Configuration management
- performance: Performance monitoring utilities
"""

__version__ = "1.0.0"
__author__ = "RailsI18n Team"
__description__ = "Translation lookup for Rails-style YAML locale files"
