"""
Data structures of the domain: credentials, resource references, bodies.

All the structures are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
