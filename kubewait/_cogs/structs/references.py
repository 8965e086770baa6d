import dataclasses
import re
from collections.abc import Collection
from typing import NewType

# A specific really existing addressable namespace (at least, the one assumed to be so).
# Made as a NewType for stricter type-checking to avoid collisions with other strings.
NamespaceName = NewType('NamespaceName', str)

# A namespace reference usable in the API calls. `None` means cluster-wide API calls.
Namespace = NamespaceName | None

VERSION_PATTERN = re.compile(r'^v\d+(?:(?:alpha|beta)\d+)?$')


@dataclasses.dataclass(frozen=True, repr=False)
class Resource:
    """
    A specific resource kind of a specific API group & version, as discovered.

    The resources are identified (compared & hashed) only by the parts of
    their URLs: the group, the version, the plural name. The other names
    are used to match the user-typed selectors, and for the messages.
    """

    group: str  # e.g. "apps", "example.com"; "" for the core API.
    version: str  # e.g. "v1", "v1beta1"
    plural: str  # e.g. "pods", "deployments"

    kind: str | None = dataclasses.field(default=None, compare=False)
    singular: str | None = dataclasses.field(default=None, compare=False)
    shortcuts: frozenset[str] = dataclasses.field(default=frozenset(), compare=False)
    namespaced: bool | None = dataclasses.field(default=None, compare=False)

    # Only the preferred versions are selected when the version is not typed explicitly.
    preferred: bool = dataclasses.field(default=True, compare=False)

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        return f'{self.group}/{self.version}' if self.group else self.version

    @property
    def title(self) -> str:
        """ A human-readable name for the messages, e.g. ``"Service"``. """
        return self.kind or self.singular or self.plural

    def get_url(
            self,
            *,
            namespace: Namespace = None,
            name: str | None = None,
    ) -> str:
        """
        Build a relative URL of an object by its name, or of a list of objects.

        The namespace is ignored for cluster-scoped resources. For namespaced
        resources, it is required for the objects and optional for the lists
        (the cluster-wide lists are returned then).
        """
        namespace = namespace if self.namespaced else None
        if self.namespaced and namespace is None and name is not None:
            raise ValueError(f"A namespace is required for the object {name!r} of {self!r}.")

        parts = ['/apis', self.group] if self.group else ['/api']
        parts += [self.version]
        parts += ['namespaces', namespace] if namespace is not None else []
        parts += [self.plural, name] if name is not None else [self.plural]
        return '/'.join(parts)


@dataclasses.dataclass(frozen=True)
class Selector:
    """
    A resource as typed by a user, the same way as for ``kubectl``.

    E.g.: ``pods``, ``pod``, ``po``, ``Pod`` (in any API group),
    ``deployments.apps`` (in a specific group, of its preferred version),
    ``deployments.v1.apps`` and ``pods.v1`` (of a specific group & version).

    The selectors are resolved into specific resources via the API discovery
    (see :func:`kubewait._cogs.clients.scanning.resolve_resource`).
    """
    name: str
    group: str | None = None
    version: str | None = None

    def __str__(self) -> str:
        return '.'.join(part for part in [self.name, self.version, self.group] if part)

    @classmethod
    def parse(cls, text: str) -> "Selector":
        name, _, rest = text.strip().partition('.')
        if not name:
            raise ValueError(f"The resource name is missing in {text!r}.")
        version, _, group = rest.partition('.')
        if VERSION_PATTERN.match(version):
            return cls(name=name, group=group, version=version)
        return cls(name=name, group=rest or None)

    def matches(self, resource: Resource) -> bool:
        names = {resource.plural, resource.singular, *resource.shortcuts}
        kind = resource.kind.lower() if resource.kind else None
        return (
            (self.group is None or self.group == resource.group) and
            (self.version == resource.version if self.version else resource.preferred) and
            (self.name in names or self.name.lower() == kind)
        )

    def select(self, resources: Collection[Resource]) -> Collection[Resource]:
        selected = {resource for resource in resources if self.matches(resource)}

        # The core API has priority over the other groups, as hard-coded in kubectl:
        # e.g. "pods" are "pods.v1", not "pods.v1beta1.metrics.k8s.io", unless typed so.
        core = {resource for resource in selected if resource.group == ''}
        return core or selected
