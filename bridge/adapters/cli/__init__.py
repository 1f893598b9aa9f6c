"""
Typer command-line interface
"""
