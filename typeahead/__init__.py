"""Type-ahead search aggregator: one input box over several independent collections."""
