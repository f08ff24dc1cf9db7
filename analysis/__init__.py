"""
Analysis package for the Banker's Safety Simulator.
Contains the per-pass event trace and run metrics.
"""
