"""Audio, timing, instrument and settings core. No Qt widgets in here."""
