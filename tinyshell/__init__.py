"""Building blocks of a small command shell: lexer, environment, builtins,
redirections, wildcards and pipeline execution."""

__version__ = "0.1.0"