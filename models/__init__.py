"""
Models package for the Banker's Safety Simulator.
Contains resource vectors, the shared pool, process records and the ledger.
"""
