"""
st80: Smalltalk-80 session launcher

Boots a virtual image on a pluggable interpreter, resolves the disk files
that belong to it and keeps them flushed when the session ends.

Subpackages:
    common:  config, settings, shared value types and errors
    store:   backing-store probes (alto, tajo, image only)
    display: X11 screen lookup and display geometry negotiation
    session: option parsing, lifecycle and shutdown policy
    vm:      interpreter collaborator protocols and factory loading
"""

__version__ = "1.0.0"
__author__ = "st80 contributors"

__all__ = [
    "__version__",
    "__author__",
]
