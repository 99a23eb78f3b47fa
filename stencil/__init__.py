"""stencil -- declarative project scaffolding.

Downloads a template repository and runs the ordered actions declared in its
``stencil.yaml``: prompts, placeholder replacements, file operations and
shell commands.
"""

__version__ = "0.1.0"
