"""Core services: input normalization, logging, resource lookup."""
