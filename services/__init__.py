"""
Endpoint discovery services.
"""
