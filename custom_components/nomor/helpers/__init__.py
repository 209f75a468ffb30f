"""Home Assistant-aware helper modules for the Nomor integration."""
