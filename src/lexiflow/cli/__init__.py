"""
Command-line interface for LexiFlow
"""
