"""State layer.

The store is the single place where collection, count, loading state and
local state change. Everything else (dispatcher, crud views) goes through
its setters or the loading-state transitions in :mod:`crudstore.state.loading`.
"""
