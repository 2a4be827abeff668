"""
equibot: Hold'em Equity Advisor

Estimates a player's chance of winning a hold'em hand by Monte Carlo
simulation and turns the estimate into a pot-odds betting decision.
"""

__version__ = "0.1.0"
