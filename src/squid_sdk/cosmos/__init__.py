"""Cosmos execution: message building, fees, simulation and signing."""
