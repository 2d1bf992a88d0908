"""
Input validation, response assembly, and cross-subnet comparison.
"""
