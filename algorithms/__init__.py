"""
Algorithms package for the Banker's Safety Simulator.
Contains the safety/completion algorithm (Banker's) and the dry-run safety check.
"""
