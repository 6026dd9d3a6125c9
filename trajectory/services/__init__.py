"""Analytics services over ledger history"""
