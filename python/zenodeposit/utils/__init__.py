"""
Utility functions used throughout the zenodeposit package
"""
