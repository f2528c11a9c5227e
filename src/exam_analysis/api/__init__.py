"""
Stateless HTTP wrappers over the generator and analysis operations.
"""
