"""Request protocol: typed request variants, handlers and the dispatch boundary."""
