"""Content feature package: the generation webhook client and its public routes."""
