"""Analytics reporting endpoints"""
