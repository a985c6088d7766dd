"""Command line interface for formai.

- ``python -m formai.cli ocr IMAGE``      read text from an image
- ``python -m formai.cli analyze FILE``   classify text, extract fields
- ``python -m formai.cli health``         provider availability
- ``python -m formai.cli providers``      configured providers

All commands accept ``--json`` before the subcommand.
"""
