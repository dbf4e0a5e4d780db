"""
HTTP surface for the caricature generator.
"""
