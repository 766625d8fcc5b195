"""Building blocks of a small shell: variables, syntax checks, expansion, tokens, redirections, builtins and pipelines."""

__version__ = "0.1.0"