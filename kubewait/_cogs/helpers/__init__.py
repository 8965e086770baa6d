"""
General-purpose helpers not related to the waiting logic itself
(neither to the poller nor to the conditions nor to the structs),
which are used to prepare and control the runtime environment.

Helpers do not depend on anything else in the package. They implement
no entities or behaviours of the domain of Kubernetes resources,
but rather some unrelated low-level patterns.
"""
