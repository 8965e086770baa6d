"""
A minimal read-only client for the Kubernetes API on top of ``aiohttp``.

Only what is needed to observe the resources: authenticated GET requests
with retries, the K8s-specific errors, the resources' discovery, and reading
of individual objects by their names.
"""
