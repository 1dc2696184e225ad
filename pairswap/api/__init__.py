"""Read API for pools."""
