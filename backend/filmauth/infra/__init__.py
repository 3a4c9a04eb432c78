"""Adapters implementing service-layer ports on concrete infrastructure."""
