"""Domain helpers: document registry, multilingual fields, update ordering, media rules."""
