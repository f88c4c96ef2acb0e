"""Settings, logging, seating layout and date helpers."""
