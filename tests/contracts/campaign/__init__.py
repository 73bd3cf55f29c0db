"""
Campaign Service Contract Module

This module contains:
- data_contract.py: test data factories for campaign service models
"""
