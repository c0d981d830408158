"""API reference generator for the JavaScript/.NET interop packages.

Drives TypeDoc and XmlDocMarkdown and post-processes their output for the
documentation site.
"""
