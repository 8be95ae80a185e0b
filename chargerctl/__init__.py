"""Find an EV charger over Bluetooth LE and query its charging status."""
