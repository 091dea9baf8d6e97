"""Client for the SmartFarm equipment-rental booking backend."""

__version__ = "1.0.0"
