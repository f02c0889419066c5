"""Snake on a square grid, played by a human or by a tabular Q-learning agent."""
__version__ = "0.1.0"
