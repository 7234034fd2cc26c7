"""loralux: periodic scraper for LoRaWAN lumen sensor readings."""

__version__ = "0.1.0"
