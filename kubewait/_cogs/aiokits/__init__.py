"""
Asyncio kits: generic low-level asyncio primitives not bound to the domain.
"""
