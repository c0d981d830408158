"""Documentation pipelines and the Markdown/navigation helpers they share."""
