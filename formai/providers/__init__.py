"""Concrete adapters for formai's interfaces (``formai/interfaces/``)."""
