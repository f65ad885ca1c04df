"""Client library for the garden marketplace API: session, auth, cart and checkout."""

__version__ = "0.1.0"
