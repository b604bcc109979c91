"""Application DTOs: commands and read-models passed across layers (no ORM)."""
