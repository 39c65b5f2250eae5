"""
Equinode - provision Equilibria test nodes in Docker containers.
"""

__version__ = "0.1.0"
