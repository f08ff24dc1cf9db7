"""
Utilities package for the Banker's Safety Simulator.
Contains the data file loader and the console/file logger.
"""
