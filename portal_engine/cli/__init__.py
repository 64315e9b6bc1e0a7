"""
Command line serving layer for the adaptive learning engine.
"""
