"""tf-wrap — terraform wrapper with remembered environment/region selection.

Resolves backend and variable files from the
``$INFRA_DIR/$ENVIRONMENT/$REGION/$MODULE_NAME`` layout and delegates to
the ``terraform`` binary.
"""

from tf_wrap.version import __version__

__all__: list[str] = ["__version__"]
