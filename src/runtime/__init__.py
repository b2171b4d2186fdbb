# path: src/runtime/__init__.py

"""
Runtime wiring for the data service.

Holds the logging setup, the per-step error guard, and the command-line
entrypoint that builds a DataManager from config/data_service.yaml.

Usage:
    python -m runtime.main --profile cn
"""
