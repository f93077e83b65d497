"""Resolution core: catalog lookups, disambiguation, role filtering and dispatch."""
