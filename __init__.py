"""
vacuum_tunnel - Vacuum Decay Tunneling Estimates

A modular package for estimating how likely a metastable vacuum of a scalar
potential is to survive, featuring vacuum searches from starting points,
path-deformation bounce actions, quantum and thermal survival probabilities
with overflow-safe saturation, and batch scans over parameter points.
"""

__version__ = "0.1.0"
