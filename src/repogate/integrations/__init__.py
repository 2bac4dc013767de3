"""Framework integrations for repogate.

Each submodule needs its optional extra installed and is imported directly,
e.g. ``from repogate.integrations.langchain import create_langchain_tools``.
"""

from repogate.integrations._render import render_result

__all__ = ["render_result"]
