"""Core language machinery: AST, errors, settings and the pipeline."""
