"""Toroidal grid navigation and decision engine for a Pac-Man style agent."""
