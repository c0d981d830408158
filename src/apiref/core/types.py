"""Core type definitions."""

from typing import NewType

# Site-relative link (e.g., "/reference/dotnet/Foo", "/reference/dotnet/#foo-bar")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
