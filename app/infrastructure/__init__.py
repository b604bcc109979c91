"""Infrastructure: persistence, security and outbound services."""
