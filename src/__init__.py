"""
Buyer Leads - Source Root
"""
