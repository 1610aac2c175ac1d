"""
Boundary layer: persistence and outbound HTTP adapters.
"""
