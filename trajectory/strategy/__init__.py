"""Recommendations, what-if scenarios and recommendation effectiveness"""
