"""Block extraction: classification, tree expansion, boards and media."""
