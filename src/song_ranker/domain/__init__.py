"""Domain layer - song libraries and ranking logic, no I/O."""
