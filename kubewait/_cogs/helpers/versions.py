"""
Detecting the package's own version.

The codebase does not contain the version directly: it belongs to the packaging
metadata. The version is determined only once at startup when the code is loaded.
"""
version: str | None = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "kubewait", unless renamed/forked.
        version = importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        pass  # running from a source tree without installation.
