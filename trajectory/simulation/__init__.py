"""Multi-year trajectory forecasting"""
