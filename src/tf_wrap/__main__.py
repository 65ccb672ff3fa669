"""Allow ``python -m tf_wrap`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m tf_wrap`` behaves identically to the ``tf-wrap``
console script.
"""

from __future__ import annotations

from tf_wrap.cli.app import cli

if __name__ == "__main__":
    cli()
