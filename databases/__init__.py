"""Database files for the water treatment evaluation tools.

This package contains YAML files for:
- default_actions.yaml: Default target ranges, action texts and index bands
"""
