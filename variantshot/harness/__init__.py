"""Variant harness.

The harness sits between a test and the snapshot collaborator: it applies the
active variant to the content, resolves which test is running, and names the
captured artifact so that every (suite, case, variant) triple gets its own
baseline.
"""
