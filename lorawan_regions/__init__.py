"""LoRaWAN regional channel plans, channel selection and radio configuration for end devices."""

__version__ = "0.1.0"