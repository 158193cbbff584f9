"""
Structured-data queries over pipe contents.
"""

from shellpipe.query.jq import JQProgram, compile_query

__all__ = [
    "JQProgram",
    "compile_query",
]
